"""Registration and recharge endpoints."""

from __future__ import annotations

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status

from app.api.dependencies import get_services
from app.core.auth import get_current_user
from app.core.container import ServiceContainer
from app.core.errors import ValidationAppError
from app.core.rate_limit import enforce_registration_throttle, get_client_ip
from app.schemas.accounts import RechargeRequest, RechargeResponse, RegisterResponse
from app.services.identity_store import User
from app.services.recharge_service import recharge

router = APIRouter(tags=["Accounts"])


def _is_json_content_type(value: str | None) -> bool:
    if not value:
        return False
    media_type = value.split(";")[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def get_recharge_amount(request: Request) -> Any:
    """Return the raw ``amount`` from the recharge body, or ``None``.

    Only a JSON object body is read. Other media types, an empty body, and
    JSON values that are not objects (numbers, arrays, strings) all yield
    ``None``, which the recharge service turns into the default amount.

    Raises:
        ValidationAppError: The body claims to be JSON but does not parse.
    """
    if not _is_json_content_type(request.headers.get("content-type")):
        return None

    raw = await request.body()
    if not raw.strip():
        return None
    try:
        body = json.loads(raw)
    except ValueError as exc:
        raise ValidationAppError(
            code="validation_error",
            message="Request payload is invalid.",
            details={"errors": [{"loc": ["body"], "msg": "Invalid JSON body"}]},
        ) from exc

    if not isinstance(body, dict):
        return None
    return RechargeRequest.model_validate(body).amount


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_registration_throttle)],
)
def register(
    services: Annotated[ServiceContainer, Depends(get_services)],
    client_ip: Annotated[str, Depends(get_client_ip)],
) -> RegisterResponse:
    """Issue a bearer token with the initial credit allowance.

    Raises:
        AlreadyRegisteredAppError: 403 when this IP still holds a funded token.
        TooManyAttemptsAppError: 429 when the IP exceeded its attempts.
    """
    result = services.identity_store.register(client_ip)
    return RegisterResponse(
        token=result.token,
        requests_number=result.requests_number,
        message=f"Registration successful. You have {result.requests_number} requests.",
    )


@router.post(
    "/recharge",
    response_model=RechargeResponse,
    dependencies=[Depends(enforce_registration_throttle)],
    openapi_extra={
        "requestBody": {
            "required": False,
            "content": {"application/json": {"schema": RechargeRequest.model_json_schema()}},
        }
    },
)
def recharge_credits(
    services: Annotated[ServiceContainer, Depends(get_services)],
    user: Annotated[User, Depends(get_current_user)],
    raw_amount: Annotated[Any, Depends(get_recharge_amount)],
) -> RechargeResponse:
    """Add request credits to the caller's balance.

    A missing, non-numeric, zero or negative ``amount`` adds the default.
    """
    outcome = recharge(
        services.ledger,
        user,
        raw_amount,
        default=services.settings.default_recharge_amount,
    )
    return RechargeResponse(
        message=f"Recharged {outcome.amount} requests.",
        new_requests_number=outcome.balance,
    )
