"""Pipeline configuration: per-kind POI defaults, line style, projection choice.

Configuration can be built in code or loaded from a TOML file::

    method = "utm_grid"
    poi_set_name = "Donnelly POIs"

    [reference]
    latitude = 41.7212
    longitude = -73.9325

    [feature_defaults.manhole]
    tracking_radius = 100
    canvas_asset = "Prefabs/POIManhole"

    [line_style]
    color = "#00FF00"
    width = 0.25

Per-kind tables are merged over the built-in defaults, so a file only needs
the keys it changes.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .models import AssetHandle, PlacementMode, ProjectionMethod, ReferencePoint

CONFIG_ENV_VAR = "SURVEY_PIPELINE_CONFIG"


class FeatureDefaults(BaseModel):
    """Defaults applied to every POI of one feature kind."""

    label_format: str = "{label}"
    tracking_radius: float = 75.0
    close_tracking_radius: float = 15.0
    placement_mode: PlacementMode = PlacementMode.ALIGN_WITH_GROUND
    relative_height: float = 0.0
    facing_heading: float = 0.0  # degrees from north
    icon: AssetHandle | None = None
    object_asset: AssetHandle | None = None
    model_asset: AssetHandle | None = None
    canvas_asset: AssetHandle | None = None

    @field_validator("label_format")
    @classmethod
    def _known_placeholders(cls, value: str) -> str:
        try:
            value.format(label="label", id="id", kind="kind")
        except (KeyError, IndexError, AttributeError, ValueError) as exc:
            raise ValueError(
                f"label_format {value!r} may only use {{label}}, {{id}} and {{kind}} ({type(exc).__name__}: {exc})"
            ) from exc
        return value


class LineStyle(BaseModel):
    color: str = "#FF0000"
    width: float = 0.5


def builtin_feature_defaults() -> dict[str, dict[str, Any]]:
    return {
        "manhole": {
            "label_format": "Manhole {label}",
            "icon": "Prefabs/POIManholeIcon",
            "canvas_asset": "Prefabs/POIManhole",
        },
        "enclosure": {
            "label_format": "{label}",
            "canvas_asset": "Prefabs/POIManhole",
        },
        "conduit": {
            "label_format": "{label}",
            "canvas_asset": "Prefabs/POIFiberLine",
        },
    }


class PipelineConfig(BaseModel):
    method: ProjectionMethod = ProjectionMethod.EQUIRECTANGULAR
    reference: ReferencePoint | None = None
    feature_defaults: dict[str, FeatureDefaults] = Field(
        default_factory=lambda: {k: FeatureDefaults(**v) for k, v in builtin_feature_defaults().items()}
    )
    line_style: LineStyle = Field(default_factory=LineStyle)
    poi_set_name: str = "Generated POI Set"
    line_set_name: str = "Generated Conduit Lines"

    def defaults_for(self, kind: str) -> FeatureDefaults:
        return self.feature_defaults.get(kind) or FeatureDefaults()


def merge_dicts(a: dict[str, Any], b: dict[str, Any]) -> dict[str, Any]:
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = merge_dicts(out[k], v)
        else:
            out[k] = v
    return out


def config_from_dict(data: dict[str, Any]) -> PipelineConfig:
    """Build a config from plain data, merging per-kind tables over the built-ins."""
    data = dict(data)
    data["feature_defaults"] = merge_dicts(builtin_feature_defaults(), data.get("feature_defaults") or {})
    return PipelineConfig.model_validate(data)


def load_config(path: str | Path) -> PipelineConfig:
    with open(path, "rb") as f:
        return config_from_dict(tomllib.load(f))


def config_from_env() -> PipelineConfig:
    """Load the file named by ``SURVEY_PIPELINE_CONFIG``, or return the defaults."""
    path = os.getenv(CONFIG_ENV_VAR)
    if not path:
        return PipelineConfig()
    return load_config(path)
