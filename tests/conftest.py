"""
Pytest configuration and shared fixtures for the wardrobe API tests.
"""
import os
import sys
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Generator
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))

# The module-level app in api.app is built at import; keep it off the network
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-key")
os.environ["CATALOG_BACKEND"] = "memory"


# ============================================================================
# Fixtures: Test Data
# ============================================================================

JACKET_ID = "11111111-1111-4111-8111-111111111111"
TEE_ID = "22222222-2222-4222-8222-222222222222"
JEANS_ID = "33333333-3333-4333-8333-333333333333"
SNEAKERS_ID = "44444444-4444-4444-8444-444444444444"
SUMMER_OUTFIT_ID = "aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa"
WINTER_OUTFIT_ID = "bbbbbbbb-bbbb-4bbb-8bbb-bbbbbbbbbbbb"
MISSING_ID = "99999999-9999-4999-8999-999999999999"

FIXED_NOW = datetime(2024, 7, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def ids() -> SimpleNamespace:
    """Row ids used by the sample data."""
    return SimpleNamespace(
        jacket=JACKET_ID,
        tee=TEE_ID,
        jeans=JEANS_ID,
        sneakers=SNEAKERS_ID,
        summer_outfit=SUMMER_OUTFIT_ID,
        winter_outfit=WINTER_OUTFIT_ID,
        missing=MISSING_ID,
    )


def _ts(days_ago: int) -> str:
    return (FIXED_NOW - timedelta(days=days_ago)).isoformat()


@pytest.fixture
def clothing_rows() -> list[dict]:
    """Clothing rows as returned by the store."""
    return [
        {
            "id": JACKET_ID,
            "name": "Denim Jacket",
            "category": "outerwear",
            "image": "https://cdn.test/jacket.png",
            "tags": ["denim", "casual"],
            "created_at": _ts(30),
            "updated_at": _ts(30),
        },
        {
            "id": TEE_ID,
            "name": "White Tee",
            "category": "top",
            "image": "https://cdn.test/tee.png",
            "tags": ["basic", "casual"],
            "created_at": _ts(2),
            "updated_at": _ts(2),
        },
        {
            "id": JEANS_ID,
            "name": "Slim Jeans",
            "category": "bottom",
            "image": "https://cdn.test/jeans.png",
            "tags": ["denim"],
            "created_at": _ts(10),
            "updated_at": _ts(10),
        },
        {
            "id": SNEAKERS_ID,
            "name": "Canvas Sneakers",
            "category": "shoes",
            "image": "https://cdn.test/sneakers.png",
            "tags": [],
            "created_at": _ts(20),
            "updated_at": _ts(20),
        },
    ]


@pytest.fixture
def outfit_rows() -> list[dict]:
    """Outfit rows as returned by the store."""
    return [
        {
            "id": SUMMER_OUTFIT_ID,
            "name": "Summer Denim",
            "description": "Light denim look for warm days",
            "items": [TEE_ID, JEANS_ID],
            "tags": ["denim", "casual"],
            "season": "summer",
            "thumbnail": "https://cdn.test/tee.png",
            "created_at": _ts(1),
            "updated_at": _ts(1),
        },
        {
            "id": WINTER_OUTFIT_ID,
            "name": "Winter Layers",
            "description": "Jacket over jeans",
            "items": [JACKET_ID, JEANS_ID],
            "tags": ["warm"],
            "season": "winter",
            "thumbnail": "https://cdn.test/jacket.png",
            "created_at": _ts(40),
            "updated_at": _ts(40),
        },
    ]


@pytest.fixture
def memory_store(clothing_rows, outfit_rows):
    """In-memory catalog seeded with the sample rows."""
    from catalog.memory import InMemoryCatalogStore
    return InMemoryCatalogStore(seed={"clothing": clothing_rows, "outfits": outfit_rows})


@pytest.fixture
def empty_store():
    from catalog.memory import InMemoryCatalogStore
    return InMemoryCatalogStore()


@pytest.fixture
def memory_blob():
    from catalog.blob import InMemoryBlobStore
    return InMemoryBlobStore("clothing-images", "https://test.supabase.co")


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


# ============================================================================
# Fixtures: Settings
# ============================================================================

@pytest.fixture
def test_settings():
    """Settings for the in-memory backend, isolated from the environment."""
    from config.settings import get_settings_for_testing
    return get_settings_for_testing(catalog_backend="memory")


# ============================================================================
# Fixtures: Mock Services
# ============================================================================

@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock RPC calls
    mock_client.rpc.return_value.execute.return_value.data = []

    # Mock table operations
    mock_client.table.return_value.select.return_value.execute.return_value.data = []
    mock_client.table.return_value.insert.return_value.execute.return_value.data = [{"id": "test"}]

    return mock_client


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================

@pytest.fixture
def app_context(test_settings, memory_store, memory_blob):
    from api.context import build_context
    return build_context(test_settings, store=memory_store, blob=memory_blob)


@pytest.fixture
def app(app_context):
    """FastAPI application wired to the in-memory stores."""
    from api.app import create_app
    return create_app(context=app_context)


@pytest.fixture
def client(app) -> Generator:
    from fastapi.testclient import TestClient
    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "supabase: marks tests that require Supabase")
