"""Gateway registration and proxy router."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from models import Gateway, GatewayCreate, GatewayUpdate, ProxyRequest
from services import GatewayRegistry, SyncOrchestrator

from .dependencies import get_orchestrator, get_registry

router = APIRouter(prefix="/api/gateways", tags=["gateways"])


@router.get("", response_model=List[Gateway])
def list_gateways(registry: GatewayRegistry = Depends(get_registry)) -> List[Gateway]:
    return registry.list_gateways()


@router.get("/{gateway_id}", response_model=Gateway)
def get_gateway(gateway_id: str, registry: GatewayRegistry = Depends(get_registry)) -> Gateway:
    return registry.get(gateway_id)


@router.post("", response_model=Gateway, status_code=status.HTTP_201_CREATED)
def create_gateway(payload: GatewayCreate, registry: GatewayRegistry = Depends(get_registry)) -> Gateway:
    return registry.create(payload)


@router.put("/{gateway_id}", response_model=Gateway)
def update_gateway(
    gateway_id: str,
    payload: GatewayUpdate,
    registry: GatewayRegistry = Depends(get_registry),
):
    try:
        return registry.update(gateway_id, payload)
    except ValueError as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(e)})


@router.delete("/{gateway_id}")
def delete_gateway(gateway_id: str, registry: GatewayRegistry = Depends(get_registry)) -> dict:
    registry.delete(gateway_id)
    return {"success": True}


@router.post("/{gateway_id}/proxy")
async def proxy_to_gateway(
    gateway_id: str,
    payload: ProxyRequest,
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Forward a request to the gateway and relay its status code and body."""
    status_code, body = await orchestrator.proxy_async(gateway_id, payload)
    if status_code in (status.HTTP_204_NO_CONTENT, status.HTTP_304_NOT_MODIFIED):
        return Response(status_code=status_code)
    return JSONResponse(status_code=status_code, content=body)
