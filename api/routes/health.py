"""Health check route.

Provides:
- GET /health - Basic liveness check (no authentication)
"""

from fastapi import APIRouter

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict:
    """Basic liveness check.

    Returns:
        dict: {"status": "ok"}
    """
    return {"status": "ok"}
