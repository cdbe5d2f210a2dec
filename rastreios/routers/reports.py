"""Router para o dashboard de relatórios."""

import logging

from fastapi import APIRouter, Depends

from ..database import DbSession
from ..schemas import ReportSummary
from ..services.reports import TrackingFilters, build_summary
from ..services.scope import CompanyScope
from ..services.trackings import TrackingStore
from .auth import get_company_scope
from .trackings import get_filters

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/summary", response_model=ReportSummary)
def get_summary(
    db: DbSession,
    scope: CompanyScope = Depends(get_company_scope),
    filters: TrackingFilters = Depends(get_filters),
):
    """
    Totais por status e tipo, produção por tipo, produtividade do dia por
    responsável e a série dos últimos 7 dias.
    """
    return build_summary(TrackingStore(db, scope).list(), filters)
