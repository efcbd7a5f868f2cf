from __future__ import annotations

from fastapi import APIRouter

from app.schemas.accounts import MessageResponse

router = APIRouter(tags=["Health"])


@router.get("/ping", response_model=MessageResponse)
def ping() -> MessageResponse:
    """Liveness check answering ``pong``."""

    return MessageResponse(message="pong")


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Returns a simple status response to verify the API is operational.
    Used by load balancers and monitoring systems to determine service health.

    Returns:
        dict: A dictionary with a single "status" key set to "ok".
    """

    return {"status": "ok"}
