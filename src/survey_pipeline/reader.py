"""Survey JSON reader with per-section decoding for both input schemas.

Two document shapes are accepted:

- the zone schema: ``{"zone": ..., "conduits": [...], "manholes": [...]}``
  where manhole coordinates are usually text (``"Latitude": "41.72"``);
- the enclosure schema: a top-level array of
  ``{"id", "name", "gps_coordinates": {"latitude", "longitude"}, "directions", "notes"}``.

Coordinates are kept exactly as they appeared; turning them into numbers is
the validator's job.
"""

from __future__ import annotations

import json
import logging
from typing import Any, BinaryIO, Callable

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import MalformedInput, MalformedRecord
from .models import ConduitRecord, Diagnostic, PointRecord, RawCoordinate, SurveyZone

logger = logging.getLogger(__name__)


class _ManholeEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Any = None
    mid: Any = None
    description: Any = None
    latitude: RawCoordinate = Field(default=None, alias="Latitude")
    longitude: RawCoordinate = Field(default=None, alias="Longitude")

    def to_record(self) -> PointRecord:
        return PointRecord(
            kind="manhole",
            id=self.id,
            label=self.mid,
            description=self.description,
            latitude=self.latitude,
            longitude=self.longitude,
        )


class _GpsCoordinates(BaseModel):
    latitude: RawCoordinate = None
    longitude: RawCoordinate = None


class _EnclosureEntry(BaseModel):
    id: Any = None
    name: Any = None
    gps_coordinates: _GpsCoordinates | None = None
    directions: dict[str, list[str] | None] | None = None
    notes: Any = None

    def to_record(self) -> PointRecord:
        gps = self.gps_coordinates or _GpsCoordinates()
        return PointRecord(
            kind="enclosure",
            id=self.id,
            label=self.name,
            description=self.notes,
            latitude=gps.latitude,
            longitude=gps.longitude,
            directions=self.directions,
        )


def _decode_conduit(entry: Any) -> ConduitRecord:
    return ConduitRecord.model_validate(entry)


def _decode_manhole(entry: Any) -> PointRecord:
    return _ManholeEntry.model_validate(entry).to_record()


def _decode_enclosure(entry: Any) -> PointRecord:
    return _EnclosureEntry.model_validate(entry).to_record()


_SECTION = TypeAdapter(list[Any])


def read_zone_json(source: str | bytes | BinaryIO) -> SurveyZone:
    """Decode a zone document into conduits and manhole point records.

    Args:
        source: JSON text, UTF-8 bytes, or a binary file-like object.

    Raises:
        MalformedInput: the document, or one of its top-level sections, cannot
            be decoded. ``section`` names which one.
    """
    document = _load_document(source)
    if not isinstance(document, dict):
        raise MalformedInput("document", f"expected a JSON object, got {type(document).__name__}")

    zone = document.get("zone")
    if zone is not None and not isinstance(zone, str):
        raise MalformedInput("zone", f"expected a string, got {type(zone).__name__}")

    diagnostics: list[Diagnostic] = []
    conduits = _decode_section(document.get("conduits"), _decode_conduit, "conduits", diagnostics)
    manholes = _decode_section(document.get("manholes"), _decode_manhole, "manholes", diagnostics)

    result = SurveyZone(zone=zone, conduits=conduits, points=manholes, diagnostics=diagnostics)
    logger.info(
        "Parsed zone %r: %d manholes, %d conduits", zone, len(result.points), len(result.conduits)
    )
    return result


def read_enclosures_json(source: str | bytes | BinaryIO) -> SurveyZone:
    """Decode an enclosure document into point records of kind ``enclosure``.

    The document is a top-level array; an object wrapping the array under an
    ``enclosures`` key is accepted too.
    """
    document = _load_document(source)
    if isinstance(document, dict):
        if "enclosures" not in document:
            raise MalformedInput("enclosures", "object has no 'enclosures' key")
        zone = document.get("zone") if isinstance(document.get("zone"), str) else None
        raw = document["enclosures"]
    else:
        zone = None
        raw = document

    diagnostics: list[Diagnostic] = []
    enclosures = _decode_section(raw, _decode_enclosure, "enclosures", diagnostics)
    result = SurveyZone(zone=zone, points=enclosures, diagnostics=diagnostics)
    logger.info("Parsed %d enclosures", len(result.points))
    return result


def _read_text(source: str | bytes | BinaryIO) -> str:
    if isinstance(source, str):
        return source
    data = source if isinstance(source, bytes) else source.read()
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedInput("document", f"not valid UTF-8: {exc}") from exc


def _load_document(source: str | bytes | BinaryIO) -> Any:
    text = _read_text(source)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInput("document", str(exc)) from exc


def _decode_section(
    raw: Any,
    decode: Callable[[Any], Any],
    section: str,
    diagnostics: list[Diagnostic],
) -> list:
    """Decode one top-level list entry by entry.

    ``None``/absent means empty and null entries are skipped. A section that is
    not a list raises ``MalformedInput``; an entry that does not decode is
    dropped with a ``MalformedRecord`` diagnostic.
    """
    if raw is None:
        logger.debug("Section %r absent, treating as empty", section)
        return []
    try:
        entries = _SECTION.validate_python(raw, strict=True)
    except ValidationError as exc:
        raise MalformedInput(section, f"expected a list, got {type(raw).__name__}") from exc

    records = []
    for index, entry in enumerate(entries):
        if entry is None:
            continue
        try:
            records.append(decode(entry))
        except ValidationError as exc:
            detail = f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}"
            error = MalformedRecord(section, index, detail)
            logger.warning("Dropping entry: %s", error)
            diagnostics.append(Diagnostic.from_error(error, record=f"{section}[{index}]"))
    return records
