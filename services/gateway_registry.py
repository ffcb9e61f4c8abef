"""Gateway registration records."""

from typing import List

from sqlalchemy import delete, select

from models import Gateway, GatewayCreate, GatewayStatus, GatewayUpdate
from storage import Database, GatewayRow
from utils import create_contextual_logger
from utils.normalize import new_gateway_id, now_epoch

from .errors import GatewayNotFound


class GatewayRegistry:
    """CRUD over the gateways table. Deleting cascades to all mirrored data."""

    def __init__(self, database: Database) -> None:
        self.database = database
        self.logger = create_contextual_logger(__name__, service="gateway_registry")

    def list_gateways(self) -> List[Gateway]:
        with self.database.session() as session:
            rows = session.scalars(
                select(GatewayRow).order_by(GatewayRow.created_at.desc(), GatewayRow.id.desc())
            ).all()
            return [Gateway.model_validate(row) for row in rows]

    def get(self, gateway_id: str) -> Gateway:
        """Return the gateway or raise GatewayNotFound."""
        with self.database.session() as session:
            row = session.get(GatewayRow, gateway_id)
            if row is None:
                raise GatewayNotFound(gateway_id)
            return Gateway.model_validate(row)

    def create(self, payload: GatewayCreate) -> Gateway:
        now = now_epoch()
        row = GatewayRow(
            id=new_gateway_id(),
            name=payload.name,
            url=payload.url,
            token=payload.token,
            status=GatewayStatus.UNKNOWN.value,
            created_at=now,
            updated_at=now,
        )
        with self.database.transaction() as session:
            session.add(row)
            session.flush()
            gateway = Gateway.model_validate(row)

        self.logger.info("Gateway registered", gateway_id=gateway.id, url=gateway.url)
        return gateway

    def update(self, gateway_id: str, payload: GatewayUpdate) -> Gateway:
        changes = payload.changes()
        if not changes:
            raise ValueError("No fields to update")

        with self.database.transaction() as session:
            row = session.get(GatewayRow, gateway_id)
            if row is None:
                raise GatewayNotFound(gateway_id)
            for field, value in changes.items():
                setattr(row, field, value)
            row.updated_at = now_epoch()
            session.flush()
            gateway = Gateway.model_validate(row)

        self.logger.info("Gateway updated", gateway_id=gateway_id, fields=sorted(changes))
        return gateway

    def delete(self, gateway_id: str) -> None:
        with self.database.transaction() as session:
            result = session.execute(delete(GatewayRow).where(GatewayRow.id == gateway_id))
            if result.rowcount == 0:
                raise GatewayNotFound(gateway_id)

        self.logger.info("Gateway deleted", gateway_id=gateway_id)
