"""FastAPI server for survey JSON processing."""

from __future__ import annotations

import csv
import io

from fastapi import FastAPI, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse

from .config import config_from_env
from .errors import MalformedInput, NoReferenceAvailable
from .models import GeoCoordinate, PointOfInterest, ProjectionMethod
from .pipeline import process_enclosures, process_zone

app = FastAPI(title="Survey Pipeline", version="0.1.0")


@app.post("/process")
async def process_survey_upload(
    file: UploadFile,
    schema: str = Query("zone", pattern="^(zone|enclosures)$"),
    method: ProjectionMethod | None = Query(None),
    ref_lat: float | None = Query(None, ge=-90, le=90),
    ref_lon: float | None = Query(None, ge=-180, le=180),
    name: str | None = Query(None),
    format: str = Query("json", pattern="^(csv|json)$"),
):
    """Process an uploaded survey JSON document and return the spatial set.

    Accepts either the zone schema (conduits + manholes) or the enclosure
    schema, selected with ``schema``. ``ref_lat``/``ref_lon`` must be given
    together and override the reference derived from the data.
    """
    if (ref_lat is None) != (ref_lon is None):
        raise HTTPException(status_code=400, detail="ref_lat and ref_lon must be given together")

    config = config_from_env()
    if method is not None:
        config = config.model_copy(update={"method": method})
    reference = GeoCoordinate(latitude=ref_lat, longitude=ref_lon) if ref_lat is not None else None

    content = await file.read()
    process = process_enclosures if schema == "enclosures" else process_zone
    try:
        result = process(content, config, reference=reference, name=name)
    except MalformedInput as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NoReferenceAvailable as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    if format == "json":
        return result

    return _pois_to_csv_response(result.spatial_set.pois)


def _pois_to_csv_response(pois: tuple[PointOfInterest, ...]) -> StreamingResponse:
    """Convert POIs to a streaming CSV response."""
    fieldnames = [
        "name", "kind", "east", "north", "up",
        "tracking_radius", "close_tracking_radius",
        "placement_mode", "relative_height", "facing_heading",
    ]

    def generate():
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=fieldnames)
        writer.writeheader()
        yield buf.getvalue()
        buf.seek(0)
        buf.truncate(0)

        for poi in pois:
            writer.writerow({
                "name": poi.name,
                "kind": poi.kind,
                "east": poi.position.east,
                "north": poi.position.north,
                "up": poi.position.up,
                "tracking_radius": poi.tracking_radius,
                "close_tracking_radius": poi.close_tracking_radius,
                "placement_mode": poi.placement_mode.value,
                "relative_height": poi.relative_height,
                "facing_heading": poi.facing_heading,
            })
            yield buf.getvalue()
            buf.seek(0)
            buf.truncate(0)

    return StreamingResponse(
        generate(),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=survey_pois.csv"},
    )
