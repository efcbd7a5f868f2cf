"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set before anything imports the settings module.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.app_factory import create_app
from app.core.config import AppSettings


class FakeClock:
    """Deterministic UNIX-seconds clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def app_settings() -> AppSettings:
    """Defaults matching production, with X-Forwarded-For trusted so tests can vary the IP."""
    return AppSettings(trust_forwarded_for=True)


@pytest.fixture
def app(app_settings: AppSettings, clock: FakeClock) -> FastAPI:
    return create_app(app_settings, clock=clock)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


def _ip_headers(ip: str, token: str | None = None) -> dict[str, str]:
    headers = {"X-Forwarded-For": ip}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


@pytest.fixture
def ip_headers() -> Callable[..., dict[str, str]]:
    """Build request headers for a given client IP and optional token."""
    return _ip_headers


@pytest.fixture
def register(client: TestClient) -> Callable[..., str]:
    """Register from ``ip`` and return the issued token."""

    def _register(ip: str = "203.0.113.10") -> str:
        response = client.post("/register", headers=_ip_headers(ip))
        assert response.status_code == 201, response.text
        return response.json()["token"]

    return _register


@pytest.fixture
def auth_headers(register: Callable[..., str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {register()}"}
