"""Shared test fixtures for the fleet operations test suite."""

import io
from collections.abc import Iterator
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from fleetops.api.app import create_app
from fleetops.db.models import Rate, Trip
from fleetops.db.session import Database
from fleetops.ocr.recognizer import OrderRecognizer
from fleetops.utils.config import AppConfig, DatabaseConfig

SAMPLE_ORDER_TEXT = """RATE CONFIRMATION
Customer: Acme Industrial
Origin: Chicago, IL
Destination: Atlanta, GA
Pickup Window: 10/22/2025 08:00 - 12:00
Delivery Window: 2025-10-23 09:00 to 2025-10-23 11:00
Equipment: 53' Reefer
Notes: Keep temp at 34F
Driver must call ahead
Contact: Dana 555-0100
"""


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_ORDER_TEXT


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.zeros((200, 300), dtype=np.uint8)
    image[50:150, 50:250] = 255
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic RGB test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def png_bytes() -> bytes:
    """A minimal PNG image as bytes."""
    img = Image.fromarray(np.zeros((100, 200, 3), dtype=np.uint8))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"


@pytest.fixture
def config() -> AppConfig:
    """Configuration backed by a private in-memory database."""
    return AppConfig(database=DatabaseConfig(url="sqlite://"))


@pytest.fixture
def database(config: AppConfig) -> Iterator[Database]:
    db = Database(config.database)
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def recognizer() -> MagicMock:
    return MagicMock(spec=OrderRecognizer)


@pytest.fixture
def client(
    config: AppConfig, database: Database, recognizer: MagicMock
) -> TestClient:
    """Create a FastAPI test client over the in-memory database."""
    app = create_app(config=config, database=database, recognizer=recognizer)
    return TestClient(app)


@pytest.fixture
def make_rate(database: Database):
    """Factory that stores a rate and returns it detached."""

    def _make(
        type_=None,
        zone=None,
        fixed="0.50",
        wage="0.30",
        add_ons="0.05",
        rolling="0.10",
    ):
        with database.session() as session:
            rate = Rate(
                type=type_,
                zone=zone,
                fixed_cpm=Decimal(fixed),
                wage_cpm=Decimal(wage),
                add_ons_cpm=Decimal(add_ons),
                rolling_cpm=Decimal(rolling),
            )
            session.add(rate)
        return rate

    return _make


@pytest.fixture
def make_trip(database: Database):
    """Factory that stores a trip and returns it detached."""

    def _make(**overrides):
        values = {
            "driver": "Alex Johnson",
            "unit": "TRK-012",
            "miles": Decimal("100"),
            "revenue": Decimal("200"),
        }
        values.update(overrides)
        with database.session() as session:
            trip = Trip(**values)
            session.add(trip)
        return trip

    return _make
