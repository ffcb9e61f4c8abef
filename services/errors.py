"""Error taxonomy for gateway sync operations.

Every failure is scoped to one sync invocation; nothing here is fatal to
the process and nothing is retried automatically.
"""

from typing import Optional


class GatewaySyncError(Exception):
    """Base class for all sync-subsystem errors."""

    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class GatewayNotFound(GatewaySyncError):
    """The requested gateway id is not registered. No state is changed."""

    http_status = 404

    def __init__(self, gateway_id: str) -> None:
        super().__init__("Gateway not found")
        self.gateway_id = gateway_id


class RemoteError(GatewaySyncError):
    """The remote call failed; the gateway is marked ``error``."""

    http_status = 502


class RemoteUnreachable(RemoteError):
    """DNS failure, refused connection or timeout."""

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"Gateway unreachable: {cause}")
        self.cause = cause


class RemoteCallFailed(RemoteError):
    """The gateway answered with a non-2xx status; its body is not trusted."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class RemoteProtocolError(RemoteError):
    """The gateway answered 2xx but the body is not the expected JSON."""

    def __init__(self, detail: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Invalid response from gateway: {detail}")
        self.cause = cause


class ReconcileStorageFailure(GatewaySyncError):
    """Writing fetched records to the local cache failed after a good fetch."""

    def __init__(self, kind: str, cause: Exception) -> None:
        super().__init__(f"Failed to store {kind}: {cause}")
        self.kind = kind
        self.cause = cause
