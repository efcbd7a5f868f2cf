"""FastAPI dependencies resolving shared services from app state.

Set via: ``app.state.services = build_services(...)`` (done by ``create_app``).
"""

from __future__ import annotations

from fastapi import Request

from app.core.container import ServiceContainer
from app.core.quota import QuotaGate
from app.services.identity_store import IdentityStore
from app.services.item_store import ItemStore


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_identity_store(request: Request) -> IdentityStore:
    return get_services(request).identity_store


def get_quota_gate(request: Request) -> QuotaGate:
    return get_services(request).quota_gate


def get_item_store(request: Request) -> ItemStore:
    return get_services(request).item_store
