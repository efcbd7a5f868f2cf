"""Tests for the per-IP throttle on /register and /recharge."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.config import AppSettings

IP = "192.0.2.50"


def _exhaust(app: FastAPI, token: str) -> None:
    app.state.services.identity_store.lookup(token).requests_number = 0


def test_sixth_registration_attempt_is_throttled(client: TestClient, ip_headers) -> None:
    statuses = [client.post("/register", headers=ip_headers(IP)).status_code for _ in range(6)]

    # one success, four "already registered", then the throttle kicks in
    assert statuses == [201, 403, 403, 403, 403, 429]


def test_throttled_response_shape_and_headers(client: TestClient, ip_headers) -> None:
    for _ in range(5):
        client.post("/register", headers=ip_headers(IP))

    response = client.post("/register", headers=ip_headers(IP))

    assert response.status_code == 429
    error = response.json()["error"]
    assert error["code"] == "too_many_attempts"
    assert error["message"] == "Too many attempts. Please register again to get a new token"
    assert error["details"]["limit"] == 5
    assert response.headers["Retry-After"] == str(error["details"]["retry_after"])
    assert response.headers["X-RateLimit-Limit"] == "5"
    assert response.headers["X-RateLimit-Remaining"] == "0"


def test_funded_token_bypasses_throttle(
    app: FastAPI, client: TestClient, ip_headers
) -> None:
    token = client.post("/register", headers=ip_headers(IP)).json()["token"]
    for _ in range(5):
        client.post("/register", headers=ip_headers(IP))

    # 7th attempt, carrying the funded token: not throttled
    register_again = client.post("/register", headers=ip_headers(IP, token))
    assert register_again.status_code == 403

    recharge = client.post("/recharge", headers=ip_headers(IP, token))
    assert recharge.status_code == 200

    throttle = app.state.services.throttle
    assert throttle.usage(f"ip:{IP}") == 5


def test_exhausted_token_does_not_bypass(app: FastAPI, client: TestClient, ip_headers) -> None:
    token = client.post("/register", headers=ip_headers(IP)).json()["token"]
    for _ in range(4):
        client.post("/register", headers=ip_headers(IP))
    _exhaust(app, token)

    response = client.post("/recharge", headers=ip_headers(IP, token))

    assert response.status_code == 429
    assert app.state.services.identity_store.lookup(token).requests_number == 0


def test_unauthenticated_recharge_counts_as_attempt(client: TestClient, ip_headers) -> None:
    for _ in range(5):
        assert client.post("/recharge", headers=ip_headers(IP)).status_code == 401

    assert client.post("/recharge", headers=ip_headers(IP)).status_code == 429


def test_throttle_is_per_ip(client: TestClient, ip_headers) -> None:
    for _ in range(6):
        client.post("/register", headers=ip_headers(IP))

    assert client.post("/register", headers=ip_headers("192.0.2.51")).status_code == 201


def test_window_boundary_resets_attempts(
    app: FastAPI, client: TestClient, clock, ip_headers
) -> None:
    token = client.post("/register", headers=ip_headers(IP)).json()["token"]
    for _ in range(5):
        client.post("/register", headers=ip_headers(IP))
    assert client.post("/register", headers=ip_headers(IP)).status_code == 429

    clock.advance(3600)
    _exhaust(app, token)

    assert client.post("/register", headers=ip_headers(IP)).status_code == 201


def test_items_routes_are_not_throttled(client: TestClient, register, ip_headers) -> None:
    token = register(IP)
    for _ in range(8):
        assert client.get("/items", headers=ip_headers(IP, token)).status_code == 200


class TestThrottleSettings:
    @pytest.fixture
    def app_settings(self) -> AppSettings:
        return AppSettings(trust_forwarded_for=True, throttle_enabled=False)

    def test_disabled_throttle_never_blocks(self, client: TestClient, ip_headers) -> None:
        statuses = {client.post("/register", headers=ip_headers(IP)).status_code for _ in range(10)}
        assert statuses == {201, 403}


class TestThrottleWithoutHeaders:
    @pytest.fixture
    def app_settings(self) -> AppSettings:
        return AppSettings(
            trust_forwarded_for=True,
            throttle_max_attempts=1,
            throttle_include_headers=False,
        )

    def test_blocked_without_rate_limit_headers(self, client: TestClient, ip_headers) -> None:
        client.post("/register", headers=ip_headers(IP))
        response = client.post("/register", headers=ip_headers(IP))

        assert response.status_code == 429
        assert "Retry-After" not in response.headers
        assert "details" not in response.json()["error"]


class TestUntrustedForwardedFor:
    @pytest.fixture
    def app_settings(self) -> AppSettings:
        return AppSettings(trust_forwarded_for=False)

    def test_forwarded_header_ignored(self, client: TestClient, ip_headers) -> None:
        assert client.post("/register", headers=ip_headers("192.0.2.1")).status_code == 201
        # different spoofed IP, same socket peer -> still the same registrant
        assert client.post("/register", headers=ip_headers("192.0.2.2")).status_code == 403
