"""Pydantic schemas for registration and recharge."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RegisterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., description="Opaque bearer token for the Authorization header.")
    requests_number: int = Field(
        ..., alias="requestsNumber", description="Credits granted at registration."
    )
    message: str


class RechargeRequest(BaseModel):
    """Recharge payload.

    ``amount`` is accepted loosely (number or numeric string). Anything that
    does not parse to a positive integer falls back to the default amount.
    """

    amount: Any = Field(None, description="Credits to add (defaults to 10).")


class RechargeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    new_requests_number: int = Field(..., alias="newRequestsNumber")


class MessageResponse(BaseModel):
    message: str
