from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from app.api.dependencies import BREACHES, CONFERENCES, get_client_identity, get_gateway
from app.core.config import settings
from app.core.rate_limit import apply_rate_limit_headers
from app.schemas.records import BreachRecord, ConferenceRecord, ErrorResponse
from app.services.gateway import CachedGateway

router = APIRouter(tags=["Data"])

_ERROR_RESPONSES = {
    429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    500: {"model": ErrorResponse, "description": "Server misconfiguration"},
    502: {"model": ErrorResponse, "description": "Spreadsheet API error"},
}

GatewayDep = Annotated[CachedGateway, Depends(get_gateway)]
ClientDep = Annotated[str, Depends(get_client_identity)]


async def _serve(resource_id: str, gateway: CachedGateway, client_identity: str, response: Response) -> list[dict]:
    result = await gateway.fetch(resource_id, client_identity)
    response.headers["X-Cache"] = result.cache_status.value
    if settings.rate_limit.include_headers:
        apply_rate_limit_headers(response, result.rate_limit)
    return result.records


@router.get("/api/breaches", response_model=list[BreachRecord], responses=_ERROR_RESPONSES)
async def list_breaches(response: Response, gateway: GatewayDep, client_identity: ClientDep) -> list[dict]:
    """Reported data breaches, most recent first (undated entries last)."""
    return await _serve(BREACHES, gateway, client_identity, response)


@router.get("/api/conferences", response_model=list[ConferenceRecord], responses=_ERROR_RESPONSES)
async def list_conferences(response: Response, gateway: GatewayDep, client_identity: ClientDep) -> list[dict]:
    """Upcoming and past conferences, most recent first (undated entries last)."""
    return await _serve(CONFERENCES, gateway, client_identity, response)


@router.options("/api/breaches", include_in_schema=False)
@router.options("/api/conferences", include_in_schema=False)
async def resource_options() -> Response:
    # Plain OPTIONS without pre-flight headers never reaches CORSMiddleware's short-circuit
    return Response(status_code=200, headers={"Allow": "GET, OPTIONS"})
