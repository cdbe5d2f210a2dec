"""Estado de edição de cada linha na tela de finalização.

Substitui os mapas soltos de "está editando" / "foi confirmado" por uma
máquina de estados por rastreio:

    Locked --edit()--> Editing --confirm()--> Saved --edit()--> Editing
                       Editing --cancel()---> (estado anterior)

Rastreios PENDENTE começam em Editing (a linha já nasce editável); os demais
começam em Locked e precisam de `edit()` antes de aceitar alterações.
"""

from enum import Enum
from typing import Any, Optional

from ..models import Tracking
from ..schemas import TrackingStatus, TrackingUpdate

EDITABLE_FIELDS = ("status", "quantity", "user", "status_rastreio")


class RowState(str, Enum):
    LOCKED = "Locked"
    EDITING = "Editing"
    SAVED = "Saved"


class InvalidTransition(Exception):
    """Transição não permitida a partir do estado atual."""

    def __init__(self, action: str, state: RowState):
        self.action = action
        self.state = state
        super().__init__(f"Não é possível {action} a partir de {state.value}")


class FinalizationRow:
    """Rascunho de finalização de um rastreio."""

    def __init__(self, tracking: Tracking):
        self.tracking_id = tracking.id
        self.current = {
            "status": tracking.status or TrackingStatus.PENDENTE.value,
            "quantity": tracking.quantity or 0,
            "user": tracking.user,
            "status_rastreio": tracking.status_rastreio,
        }
        self.draft: dict[str, Any] = {}
        if self.current["status"] == TrackingStatus.PENDENTE.value:
            self.state = RowState.EDITING
            self._resting = RowState.LOCKED
        else:
            self.state = RowState.LOCKED
            self._resting = RowState.LOCKED

    @property
    def is_editable(self) -> bool:
        return self.state == RowState.EDITING

    def value(self, field: str) -> Any:
        """Valor exibido: rascunho quando houver, senão o valor salvo."""
        return self.draft.get(field, self.current[field])

    def edit(self) -> None:
        if self.state == RowState.EDITING:
            raise InvalidTransition("editar", self.state)
        self._resting = self.state
        self.draft = dict(self.current)
        self.state = RowState.EDITING

    def set(self, field: str, value: Any) -> None:
        if field not in EDITABLE_FIELDS:
            raise KeyError(field)
        if self.state != RowState.EDITING:
            raise InvalidTransition("alterar", self.state)
        self.draft[field] = value

    def pending_changes(self) -> dict[str, Any]:
        return {
            field: value
            for field, value in self.draft.items()
            if value != self.current[field]
        }

    def confirm(self) -> Optional[TrackingUpdate]:
        """
        Fecha a edição e devolve o payload parcial para o PATCH.

        Sem alterações a linha continua em edição e nada é enviado
        (não há o que gravar, então também não passa para Saved).
        """
        if self.state != RowState.EDITING:
            raise InvalidTransition("confirmar", self.state)

        changes = self.pending_changes()
        if not changes:
            return None

        payload = TrackingUpdate(**changes)
        self.current.update(changes)
        self.draft = {}
        self.state = RowState.SAVED
        return payload

    def cancel(self) -> None:
        if self.state != RowState.EDITING:
            raise InvalidTransition("cancelar", self.state)
        self.draft = {}
        self.state = self._resting


def review_update(tracking: Tracking, payload: TrackingUpdate) -> Optional[TrackingUpdate]:
    """
    Passa um PATCH pela linha de finalização do rastreio.

    A linha é aberta para edição (se estiver travada), recebe os campos
    enviados e é confirmada. Retorna só o que de fato mudou, ou None quando
    a atualização não altera nada.
    """
    row = FinalizationRow(tracking)
    if not row.is_editable:
        row.edit()
    for field, value in payload.changes().items():
        row.set(field, value)
    return row.confirm()
