"""Router para o ciclo de vida dos rastreios (entrada, finalização, remoção)."""

import logging
from datetime import UTC, date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response

from ..database import DbSession
from ..models import Tracking
from ..schemas import TrackingCreate, TrackingOut, TrackingUpdate
from ..services.export import export_filename, trackings_to_csv
from ..services.reports import InvalidFilter, TrackingFilters, filter_trackings
from ..services.scope import CompanyScope
from ..services.trackings import TrackingStore
from .auth import get_company_scope

logger = logging.getLogger(__name__)
router = APIRouter()

# Nome do filtro -> parâmetro de query exposto
FILTER_PARAMS = {"status": "status", "tipo": "statusRastreio"}


def get_filters(
    status: Optional[str] = Query(None, description="Status ou ALL"),
    status_rastreio: Optional[str] = Query(
        None, alias="statusRastreio", description="normal/REVERSA, insucesso/INSUCESSO ou ALL"
    ),
    search: Optional[str] = Query(None, description="Trecho do código de rastreio"),
    day: Optional[date] = Query(None, alias="date", description="Data de recebimento"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
) -> TrackingFilters:
    """Filtros de consulta compartilhados por listagem, exportação e relatórios."""
    try:
        return TrackingFilters(
            status=status,
            tipo=status_rastreio,
            search=search,
            day=day,
            date_from=date_from,
            date_to=date_to,
        )
    except InvalidFilter as e:
        raise RequestValidationError(
            [{"loc": ("query", FILTER_PARAMS[e.field]), "msg": str(e), "type": "value_error"}]
        )


def _get_or_404(store: TrackingStore, tracking_id: str) -> Tracking:
    tracking = store.get(tracking_id)
    if not tracking:
        raise HTTPException(status_code=404, detail="Rastreio não encontrado")
    return tracking


@router.get("", response_model=list[TrackingOut])
def list_trackings(
    db: DbSession,
    scope: CompanyScope = Depends(get_company_scope),
    filters: TrackingFilters = Depends(get_filters),
):
    """
    Lista os rastreios, mais recentes primeiro.

    Com sessão, apenas os rastreios da empresa do usuário.
    """
    return filter_trackings(TrackingStore(db, scope).list(), filters)


@router.post("", response_model=TrackingOut, status_code=201)
def create_tracking(
    payload: TrackingCreate,
    db: DbSession,
    scope: CompanyScope = Depends(get_company_scope),
):
    """
    Registra um código bipado.

    - **trackingCode**: obrigatório; o que vier após `$` é descartado
    - **statusRastreio**: `normal` (reversa) ou `insucesso`
    - **empresa**: ignorada quando há sessão
    """
    return TrackingStore(db, scope).create(payload)


@router.get("/export.csv")
def export_trackings(
    db: DbSession,
    scope: CompanyScope = Depends(get_company_scope),
    filters: TrackingFilters = Depends(get_filters),
    tipo: bool = Query(True, description="Incluir a coluna Tipo"),
):
    """Exporta os rastreios filtrados em CSV."""
    trackings = filter_trackings(TrackingStore(db, scope).list(), filters)
    content = trackings_to_csv(trackings, include_tipo=tipo)
    filename = export_filename(datetime.now(UTC))
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.patch("/{tracking_id}", response_model=TrackingOut)
def update_tracking(
    tracking_id: str,
    payload: TrackingUpdate,
    db: DbSession,
    scope: CompanyScope = Depends(get_company_scope),
):
    """Finaliza ou corrige um rastreio (atualização parcial)."""
    store = TrackingStore(db, scope)
    tracking = _get_or_404(store, tracking_id)
    return store.update(tracking, payload)


@router.delete("/{tracking_id}", status_code=204)
def delete_tracking(
    tracking_id: str,
    db: DbSession,
    scope: CompanyScope = Depends(get_company_scope),
):
    """Remove o rastreio definitivamente."""
    store = TrackingStore(db, scope)
    store.delete(_get_or_404(store, tracking_id))
