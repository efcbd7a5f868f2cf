"""Item CRUD endpoints.

Listing and creating items cost one request credit each; updating and
deleting are free but still require a valid token.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, status

from app.api.dependencies import get_item_store, get_quota_gate
from app.core.auth import get_current_user
from app.core.quota import QuotaGate
from app.schemas.items import (
    ItemCreate,
    ItemCreatedResponse,
    ItemListResponse,
    ItemMutationResponse,
    ItemUpdate,
)
from app.services.identity_store import User
from app.services.item_store import ItemStore

router = APIRouter(prefix="/items", tags=["Items"])

CurrentUser = Annotated[User, Depends(get_current_user)]
Store = Annotated[ItemStore, Depends(get_item_store)]
Gate = Annotated[QuotaGate, Depends(get_quota_gate)]


@router.get("", response_model=ItemListResponse)
def list_items(user: CurrentUser, store: Store, gate: Gate) -> dict:
    return gate.run(user, lambda: {"items": store.list_items()})


@router.post("", response_model=ItemCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_item(payload: ItemCreate, user: CurrentUser, store: Store, gate: Gate) -> dict:
    return gate.run(
        user,
        lambda: store.create_item(payload.name, payload.description).model_dump(),
    )


@router.put("/{item_id}", response_model=ItemMutationResponse)
def update_item(
    item_id: int,
    user: CurrentUser,
    store: Store,
    payload: Annotated[ItemUpdate | None, Body()] = None,
) -> ItemMutationResponse:
    # An absent body reaches the store as "no fields" so unknown ids still 404.
    item = store.update_item(
        item_id,
        name=payload.name if payload else None,
        description=payload.description if payload else None,
    )
    return ItemMutationResponse(message="Item updated successfully.", item=item)


@router.delete("/{item_id}", response_model=ItemMutationResponse)
def delete_item(item_id: int, user: CurrentUser, store: Store) -> ItemMutationResponse:
    item = store.delete_item(item_id)
    return ItemMutationResponse(message="Item deleted successfully.", item=item)
