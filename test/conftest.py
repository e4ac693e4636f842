import mongomock
import pytest
from fastapi.testclient import TestClient

from main import app
from models.stroke_validation import CharacterTemplate, Point, Stroke
from services.db_service import get_db


def pts(*coords):
    return [Point(x=x, y=y) for x, y in coords]


def stroke(*coords, timestamp=0.0):
    return Stroke(points=pts(*coords), timestamp=timestamp)


@pytest.fixture
def db():
    return mongomock.MongoClient()["umwero_test"]


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def two_stroke_template():
    # vowel A: horizontal bar then vertical stroke down from its middle
    return CharacterTemplate.from_strokes(
        "char-a", '"',
        [pts((50, 100), (150, 100)), pts((100, 100), (100, 200))],
    )
