"""Survey JSON to local-coordinate spatial set pipeline library."""

from .config import FeatureDefaults, LineStyle, PipelineConfig, load_config
from .errors import (
    InsufficientPath,
    InvalidCoordinate,
    MalformedInput,
    MalformedRecord,
    MissingReference,
    NoReferenceAvailable,
    SurveyPipelineError,
)
from .models import (
    AssetHandle,
    Diagnostic,
    GeoCoordinate,
    LinePath,
    LocalPosition,
    PipelineResult,
    PlacementMode,
    PointOfInterest,
    ProjectionMethod,
    ReferencePoint,
    SpatialSet,
)
from .pipeline import process_enclosures, process_survey, process_zone, process_zone_file
from .projection import project, project_equirectangular, project_utm_difference, unproject_equirectangular
from .reader import read_enclosures_json, read_zone_json
from .reference import ProjectionSession, resolve_reference
from .validate import parse_coordinate, validate_zone

__all__ = [
    "AssetHandle",
    "Diagnostic",
    "FeatureDefaults",
    "GeoCoordinate",
    "InsufficientPath",
    "InvalidCoordinate",
    "LinePath",
    "LineStyle",
    "LocalPosition",
    "MalformedInput",
    "MalformedRecord",
    "MissingReference",
    "NoReferenceAvailable",
    "PipelineConfig",
    "PipelineResult",
    "PlacementMode",
    "PointOfInterest",
    "ProjectionMethod",
    "ProjectionSession",
    "ReferencePoint",
    "SpatialSet",
    "SurveyPipelineError",
    "load_config",
    "parse_coordinate",
    "process_enclosures",
    "process_survey",
    "process_zone",
    "process_zone_file",
    "project",
    "project_equirectangular",
    "project_utm_difference",
    "read_enclosures_json",
    "read_zone_json",
    "resolve_reference",
    "unproject_equirectangular",
    "validate_zone",
]
