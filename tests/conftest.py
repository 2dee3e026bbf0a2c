"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from entprep.config import ApiConfig, Settings
from entprep.core.models import Question, QuestionType
from entprep.service import ContentService

BACKEND_URL = "http://backend.test"


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (offline service flows)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def backend_down(request: httpx.Request) -> httpx.Response:
    """MockTransport handler for a backend that refuses every connection."""
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def settings(tmp_path):
    """Settings with no artificial delays and a throwaway data directory."""
    return Settings(
        api=ApiConfig(base_url=BACKEND_URL),
        data_dir=tmp_path / "entprep",
        generation_delay_seconds=0,
        assistant_delay_min_seconds=0,
        assistant_delay_max_seconds=0,
    )


@pytest.fixture
def rng():
    """Seeded RNG so generated content is reproducible."""
    return random.Random(1234)


@pytest_asyncio.fixture
async def offline_service(settings, rng):
    """Content service whose backend is unreachable."""
    service = ContentService.from_settings(
        settings, rng=rng, transport=httpx.MockTransport(backend_down)
    )
    yield service
    await service.close()


@pytest.fixture
def sample_question():
    """Provide a sample single-choice question."""
    return Question(
        id="q-sample-001",
        question="Сколько будет 2 + 2?",
        type=QuestionType.MULTIPLE_CHOICE,
        options=["3", "4", "5", "6"],
        correct_answer=1,
        explanation="2 + 2 = 4",
    )


@pytest.fixture
def sample_question_dict():
    """Provide a sample wire question as the backend sends it."""
    return {
        "id": "q-wire-001",
        "question": "Выберите все чётные числа",
        "type": "multi_select",
        "options": ["1", "2", "3", "4"],
        "correct_answer": [1, 3],
        "explanation": "2 и 4 делятся на 2",
        "subject": "math_profile",
        "difficulty": "easy",
    }
