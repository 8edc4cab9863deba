"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from survey_pipeline import FeatureDefaults, PipelineConfig, ProjectionMethod, load_config
from survey_pipeline.config import CONFIG_ENV_VAR, config_from_dict, config_from_env


class TestDefaults:
    def test_builtin_kinds(self):
        config = PipelineConfig()
        assert config.method is ProjectionMethod.EQUIRECTANGULAR
        assert config.reference is None
        assert config.defaults_for("manhole").label_format == "Manhole {label}"
        assert str(config.defaults_for("conduit").canvas_asset) == "Prefabs/POIFiberLine"
        assert str(config.defaults_for("enclosure").canvas_asset) == "Prefabs/POIManhole"

    def test_unknown_kind_gets_generic_defaults(self):
        defaults = PipelineConfig().defaults_for("valve")
        assert defaults.tracking_radius == 75
        assert defaults.close_tracking_radius == 15
        assert defaults.canvas_asset is None


class TestLoadConfig:
    def test_toml_file(self, config_path):
        config = load_config(config_path)
        assert config.method is ProjectionMethod.UTM_GRID
        assert config.poi_set_name == "Donnelly POIs"
        assert config.line_style.color == "#00FF00"
        assert config.line_style.width == 0.25

    def test_kind_tables_merge_over_builtins(self, config_path):
        manhole = load_config(config_path).defaults_for("manhole")
        assert manhole.tracking_radius == 100
        assert manhole.close_tracking_radius == 10
        # untouched keys keep the built-in values
        assert manhole.label_format == "Manhole {label}"
        assert str(manhole.icon) == "Prefabs/POIManholeIcon"

    def test_reference_table(self, tmp_path):
        path = tmp_path / "ref.toml"
        path.write_text("[reference]\nlatitude = 41.7\nlongitude = -73.9\n")
        config = load_config(path)
        assert config.reference.latitude == 41.7
        assert config.reference.altitude is None

    def test_unknown_label_placeholder_rejected_on_load(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[feature_defaults.manhole]\nlabel_format = "Manhole {mid}"\n')
        with pytest.raises(ValidationError, match="label_format"):
            load_config(path)

    @pytest.mark.parametrize("label_format", ["{0}", "{label.missing}", "{label"])
    def test_malformed_label_format(self, label_format):
        with pytest.raises(ValidationError):
            FeatureDefaults(label_format=label_format)

    def test_all_known_placeholders_accepted(self):
        defaults = FeatureDefaults(label_format="{kind} {id}: {label}")
        assert defaults.label_format == "{kind} {id}: {label}"

    def test_invalid_method(self):
        with pytest.raises(ValidationError):
            config_from_dict({"method": "mercator"})


class TestConfigFromEnv:
    def test_unset(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert config_from_env() == PipelineConfig()

    def test_set(self, monkeypatch, config_path):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))
        assert config_from_env().method is ProjectionMethod.UTM_GRID
