"""Routing endpoints."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ...config import settings
from ..dependencies import require_bearer_token
from ...schemas.routing import OptimizeRouteRequest, OptimizeRouteResponse
from ...services.routing.errors import (
    EmptyRequest,
    InvalidRequest,
    NoValidDestinations,
    ProviderConfigurationError,
    RoutingProviderError,
    Unauthorized,
)
from ...services.routing.service import handle_optimization_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post(
    "/optimize",
    response_model=OptimizeRouteResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_bearer_token)],
)
async def optimize(payload: OptimizeRouteRequest, request: Request) -> OptimizeRouteResponse:
    try:
        return await asyncio.wait_for(
            handle_optimization_request(payload, request.headers.get("Authorization")),
            timeout=settings.optimization_timeout_seconds,
        )
    except Unauthorized as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except (EmptyRequest, InvalidRequest, NoValidDestinations) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.detail) from exc
    except RoutingProviderError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.detail) from exc
    except ProviderConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.detail) from exc
    except asyncio.TimeoutError as exc:
        logger.warning(f"Route optimization timed out after {settings.optimization_timeout_seconds}s")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Route optimization timed out",
        ) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to optimize route",
        ) from exc
