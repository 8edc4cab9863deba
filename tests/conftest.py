import json
from pathlib import Path

import pytest

SAMPLEDATA = Path(__file__).parent.parent / "sampledata"


@pytest.fixture
def zone_path():
    return SAMPLEDATA / "zone_donnelly.json"


@pytest.fixture
def enclosures_path():
    return SAMPLEDATA / "enclosures.json"


@pytest.fixture
def config_path():
    return SAMPLEDATA / "pipeline.toml"


@pytest.fixture
def zone_text(zone_path):
    return zone_path.read_text()


@pytest.fixture
def zone_doc(zone_text):
    """Sample zone document as a dict, for tests that tweak it."""
    return json.loads(zone_text)


def segment(lat, lng, notes=""):
    return {"lat": lat, "lng": lng, "notes": notes}


def conduit(name, *segments, description="", id=1):
    return {"name": name, "description": description, "id": id, "segment": list(segments)}


def manhole(mid, lat, lon, description=""):
    return {"id": f"MH-{mid}", "mid": mid, "description": description, "Latitude": lat, "Longitude": lon}
