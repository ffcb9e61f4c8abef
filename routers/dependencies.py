"""Dependencies resolving services from application state."""

from fastapi import Request

from services import CacheReader, GatewayRegistry, SyncOrchestrator


def get_registry(request: Request) -> GatewayRegistry:
    return request.app.state.registry  # type: ignore[no-any-return]


def get_orchestrator(request: Request) -> SyncOrchestrator:
    return request.app.state.orchestrator  # type: ignore[no-any-return]


def get_cache_reader(request: Request) -> CacheReader:
    return request.app.state.cache_reader  # type: ignore[no-any-return]
