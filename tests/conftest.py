"""Pytest configuration and shared fixtures for card scanner tests."""

import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from cardscan.detect import build_detector
from cardscan.ocr.backends import PassthroughBackend
from cardscan.ocr.extract import LineSegmenter
from cardscan.ocr.normalize import TextNormalizer
from cardscan.reference.index import ReferenceIndex
from cardscan.utils.config import Settings

CURRENT_YEAR = 2024


@pytest.fixture(scope="session")
def test_environment():
    """Set up test environment for the entire test session."""
    with patch.dict('os.environ', {
        'LOG_LEVEL': 'DEBUG',
        'USE_REAL_OCR': 'false',
        'SIMULATION_SEED': '7',
    }):
        yield


@pytest.fixture(scope="session")
def reference():
    """Reference index built from the packaged data files, shared read-only."""
    return ReferenceIndex.load()


@pytest.fixture(scope="session")
def normalizer(reference):
    return TextNormalizer.from_reference(reference)


@pytest.fixture(scope="session")
def segmenter(reference, normalizer):
    return LineSegmenter(reference, normalizer)


@pytest.fixture(scope="session")
def test_settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, USE_REAL_OCR=False, SIMULATION_SEED=7, OCR_TIMEOUT_SECONDS=2.0)


@pytest.fixture(scope="function")
def detector(reference, test_settings):
    """Detector whose OCR backend hands the payload text straight through."""
    return build_detector(
        test_settings,
        reference=reference,
        backend=PassthroughBackend(),
        current_year=CURRENT_YEAR,
    )


@pytest.fixture(scope="function")
def simulated_detector(reference, test_settings):
    return build_detector(test_settings, reference=reference, current_year=CURRENT_YEAR)


@pytest.fixture(scope="function")
def temp_dirs():
    """Create temporary directories for each test function."""
    temp_dir = Path(tempfile.mkdtemp())
    data_dir = temp_dir / "data"
    data_dir.mkdir()

    yield {
        'temp_dir': temp_dir,
        'data_dir': data_dir,
    }

    # Cleanup
    shutil.rmtree(temp_dir)


@pytest.fixture(scope="function")
def acuna_front():
    """Modern baseball card: brand, player, team, number, parallel and serial."""
    return "\n".join([
        "2023 Topps Chrome",
        "RONALD ACUÑA JR.",
        "Atlanta Braves",
        "#RA-15",
        "REFRACTOR",
        "Serial Numbered 150/250",
    ])


@pytest.fixture(scope="function")
def over_serial_front():
    return "\n".join([
        "2023 Topps Chrome",
        "RONALD ACUÑA JR.",
        "Atlanta Braves",
        "#RA-15",
        "300/250",
    ])


@pytest.fixture(scope="function")
def implausible_year_front():
    return "\n".join([
        "1776 Topps",
        "MIKE TROUT",
        "Los Angeles Angels",
        "#27",
    ])


@pytest.fixture(scope="function")
def unlicensed_brand_front():
    """Topps did not hold a basketball license in 2015."""
    return "\n".join([
        "2015 Topps",
        "STEPHEN CURRY",
        "Golden State Warriors",
        "#30",
    ])


@pytest.fixture(scope="function")
def graded_front():
    return "\n".join([
        "PSA 10",
        "Cert #12345678",
        "2018 Topps Update",
        "SHOHEI OHTANI",
        "Los Angeles Angels",
        "#US1",
        "ROOKIE",
    ])


@pytest.fixture(scope="function")
def card_back():
    return "\n".join([
        "Ronald Acuña Jr.",
        "Card #RA-15",
        ".293 AVG 41 HR 106 RBI",
        "Position: OF",
        "© 2023 Topps",
    ])


# Configure pytest options
def pytest_configure(config):
    """Configure pytest with custom options."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Mark integration tests
        if "integration" in item.name.lower() or "TestCardScenarios" in str(item.cls):
            item.add_marker(pytest.mark.integration)

        # Mark slow tests
        if any(slow_indicator in item.name.lower() for slow_indicator in ['timeout', 'bulk', 'many_seeds']):
            item.add_marker(pytest.mark.slow)

        # Mark unit tests (default)
        if not item.get_closest_marker('integration') and not item.get_closest_marker('slow'):
            item.add_marker(pytest.mark.unit)
