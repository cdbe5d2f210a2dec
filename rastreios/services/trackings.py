"""Persistência dos rastreios e regra da data de finalização."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..models import Tracking, utc_now
from ..schemas import StatusRastreio, TrackingCreate, TrackingStatus, TrackingUpdate
from .finalization import review_update
from .scope import UNSCOPED, CompanyScope

logger = logging.getLogger(__name__)

PENDENTE = TrackingStatus.PENDENTE.value


def apply_status_change(tracking: Tracking, new_status: str) -> None:
    """
    Aplica o status e mantém `completed_at` coerente com ele.

    - PENDENTE limpa a data de finalização;
    - qualquer outro status carimba a data atual, exceto quando o status não
      muda e a data já está preenchida (atualizações repetidas não recarimbam).
    """
    if new_status == PENDENTE:
        tracking.completed_at = None
    elif new_status != tracking.status or tracking.completed_at is None:
        tracking.completed_at = utc_now()
    tracking.status = new_status


class TrackingStore:
    """Único ponto de escrita dos rastreios."""

    def __init__(self, db: Session, scope: CompanyScope = UNSCOPED):
        self.db = db
        self.scope = scope

    def _query(self):
        return self.scope.apply(self.db.query(Tracking))

    def list(self) -> list[Tracking]:
        """Todos os rastreios visíveis, mais recentes primeiro."""
        return (
            self._query()
            .order_by(Tracking.received_at.desc(), Tracking.id)
            .all()
        )

    def get(self, tracking_id: str) -> Optional[Tracking]:
        return self._query().filter(Tracking.id == tracking_id).first()

    def create(self, payload: TrackingCreate) -> Tracking:
        """Registra um rastreio novo, sempre PENDENTE e sem peças."""
        tracking = Tracking(
            tracking_code=payload.tracking_code,
            user=payload.user,
            status_rastreio=(payload.status_rastreio or StatusRastreio.NORMAL).value,
            empresa=self.scope.empresa_for_create(payload.empresa, settings.default_empresa),
            status=PENDENTE,
            completed_at=None,
            quantity=0,
            received_at=utc_now(),
        )
        self.db.add(tracking)
        self.db.commit()
        self.db.refresh(tracking)

        logger.info(f"Rastreio criado: {tracking.id} - {tracking.tracking_code} ({tracking.empresa})")
        return tracking

    def update(self, tracking: Tracking, payload: TrackingUpdate) -> Tracking:
        """Atualização parcial; `completed_at` só é alterado via status."""
        reviewed = review_update(tracking, payload)
        if reviewed is None:
            logger.debug(f"Rastreio sem alterações: {tracking.id}")
            return tracking
        changes = reviewed.changes()

        if "status" in changes:
            apply_status_change(tracking, TrackingStatus(changes["status"]).value)
        if "quantity" in changes:
            tracking.quantity = changes["quantity"]
        if "user" in changes:
            tracking.user = changes["user"]
        if "status_rastreio" in changes:
            tracking.status_rastreio = StatusRastreio(changes["status_rastreio"]).value

        self.db.commit()
        self.db.refresh(tracking)

        logger.info(f"Rastreio atualizado: {tracking.id} -> {tracking.status}")
        return tracking

    def delete(self, tracking: Tracking) -> None:
        self.db.delete(tracking)
        self.db.commit()
        logger.info(f"Rastreio removido: {tracking.id}")
