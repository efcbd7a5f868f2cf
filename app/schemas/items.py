"""Pydantic schemas for item CRUD requests and responses."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    """A stored item."""

    id: int = Field(..., description="1-based id assigned as collection length + 1.")
    name: str = Field(..., description="Display name.")
    description: str = Field("", description="Free-text description.")


class ItemCreate(BaseModel):
    """Payload for POST /items."""

    name: str = Field(..., description="Display name.")
    description: str = Field("", description="Free-text description.")


class ItemUpdate(BaseModel):
    """Payload for PUT /items/{id}; at least one non-empty field is required."""

    name: str | None = Field(None, description="New display name.")
    description: str | None = Field(None, description="New description.")


class _QuotaDecorated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    requests_number_remaining: int = Field(
        ...,
        alias="requestsNumberRemaining",
        description="Credits left after this request was charged.",
    )


class ItemListResponse(_QuotaDecorated):
    items: List[Item] = Field(default_factory=list)


class ItemCreatedResponse(Item, _QuotaDecorated):
    pass


class ItemMutationResponse(BaseModel):
    """Response for PUT and DELETE on a single item."""

    message: str
    item: Item
