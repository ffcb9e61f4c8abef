"""Gateway health tracking.

Every remote call doubles as a liveness probe: a success marks the gateway
online and refreshes last_seen_at, any remote failure marks it as errored
and leaves last_seen_at pointing at the last good contact.
"""

from typing import Optional

from sqlalchemy import update

from models import GatewayStatus
from storage import Database, GatewayRow
from utils import create_contextual_logger
from utils.normalize import now_epoch


class HealthTracker:
    """Records the outcome of remote calls on the gateway row."""

    def __init__(self, database: Database) -> None:
        self.database = database
        self.logger = create_contextual_logger(__name__, service="health_tracker")

    def record_success(self, gateway_id: str, seen_at: Optional[int] = None) -> None:
        now = seen_at if seen_at is not None else now_epoch()
        self._apply(
            gateway_id,
            status=GatewayStatus.ONLINE.value,
            last_seen_at=now,
        )

    def record_failure(self, gateway_id: str, error: Exception) -> None:
        self.logger.warning(
            "Gateway marked as error",
            gateway_id=gateway_id,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._apply(gateway_id, status=GatewayStatus.ERROR.value)

    def _apply(self, gateway_id: str, **values) -> None:
        with self.database.transaction() as session:
            result = session.execute(
                update(GatewayRow).where(GatewayRow.id == gateway_id).values(**values)
            )
        if result.rowcount == 0:
            # The gateway was deleted while its sync was in flight.
            self.logger.info("Health update skipped for missing gateway", gateway_id=gateway_id)
        else:
            self.logger.debug("Gateway health updated", gateway_id=gateway_id, status=values["status"])
