"""
Pytest configuration and shared fixtures.

Provides:
- Test environment variables (set before the app is imported)
- AnyIO backend selection
- FastAPI TestClient built from a fresh app
"""

from __future__ import annotations

import os
import sys
from collections.abc import Generator
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("OBSERVABILITY_STRUCTURED_LOGS", "false")

import pytest  # noqa: E402 (import after env setup)
from fastapi.testclient import TestClient  # noqa: E402 (import after env setup)

from jsonlogic_rules.main import create_app  # noqa: E402 (import after env setup)


# Per AnyIO testing docs: https://anyio.readthedocs.io/en/stable/testing.html
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """TestClient over a freshly created app."""
    with TestClient(create_app()) as test_client:
        yield test_client
