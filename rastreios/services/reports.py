"""Filtros e agregações do dashboard de rastreios.

Tudo aqui é função pura sobre uma coleção de rastreios já carregada; nada é
persistido nem guardado em cache, o resumo é recalculado a cada consulta.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import settings
from ..models import Tracking
from ..schemas import (
    DailyPoint,
    ReportSummary,
    StatusRastreio,
    TrackingStatus,
    TypeSplit,
    UserProductivity,
)

ALL = "ALL"
NO_USER_LABEL = "Sem usuário"
TREND_DAYS = 7

PENDENTE = TrackingStatus.PENDENTE.value
TC_FINALIZADO = TrackingStatus.TC_FINALIZADO.value

# Aceita tanto o valor gravado quanto o rótulo usado na tela
_TYPE_ALIASES = {
    "normal": StatusRastreio.NORMAL.value,
    "reversa": StatusRastreio.NORMAL.value,
    "insucesso": StatusRastreio.INSUCESSO.value,
}


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def to_local(value: datetime, tz) -> datetime:
    """Converte para o fuso local; datetimes sem fuso são tratados como UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(tz)


def local_date(value: Optional[datetime], tz) -> Optional[date]:
    return to_local(value, tz).date() if value is not None else None


def status_of(tracking: Tracking) -> str:
    return tracking.status or PENDENTE


def type_of(tracking: Tracking) -> str:
    """Rastreios sem classificação contam como reversa."""
    return tracking.status_rastreio or StatusRastreio.NORMAL.value


class InvalidFilter(ValueError):
    """Valor de filtro desconhecido; `field` é o nome do filtro."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


def normalize_type(value: Optional[str]) -> Optional[str]:
    if not value or value.upper() == ALL:
        return None
    try:
        return _TYPE_ALIASES[value.lower()]
    except KeyError:
        raise InvalidFilter("tipo", f"Tipo de rastreio inválido: {value}") from None


# =============================================================================
# FILTROS
# =============================================================================


@dataclass(frozen=True)
class TrackingFilters:
    """Filtros combináveis (E lógico) usados na finalização e nos relatórios."""

    status: Optional[str] = None
    tipo: Optional[str] = None
    search: Optional[str] = None
    day: Optional[date] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def __post_init__(self):
        status = self.status.upper() if self.status else None
        if status == ALL:
            status = None
        if status is not None and status not in TrackingStatus.__members__:
            raise InvalidFilter("status", f"Status inválido: {self.status}")
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "tipo", normalize_type(self.tipo))
        object.__setattr__(self, "search", (self.search or "").strip().lower() or None)

    def matches(self, tracking: Tracking, tz) -> bool:
        if self.status and status_of(tracking) != self.status:
            return False
        if self.tipo and type_of(tracking) != self.tipo:
            return False
        if self.search and self.search not in (tracking.tracking_code or "").lower():
            return False

        if self.day or self.date_from or self.date_to:
            received = to_local(tracking.received_at, tz)
            if self.day and received.date() != self.day:
                return False
            if self.date_from and received < datetime.combine(self.date_from, time.min, tz):
                return False
            if self.date_to and received > datetime.combine(self.date_to, time.max, tz):
                return False

        return True


def filter_trackings(
    trackings: Iterable[Tracking],
    filters: TrackingFilters,
    tz=None,
) -> list[Tracking]:
    """Aplica os filtros preservando a ordem de entrada."""
    tz = tz or local_tz()
    return [t for t in trackings if filters.matches(t, tz)]


# =============================================================================
# AGREGAÇÕES
# =============================================================================


def split_by_type(trackings: Iterable[Tracking]) -> dict[str, TypeSplit]:
    """Produzidos, pendentes e peças finalizadas de cada tipo."""
    result = {kind.value: TypeSplit() for kind in StatusRastreio}
    for tracking in trackings:
        split = result[type_of(tracking)]
        if status_of(tracking) == PENDENTE:
            split.pendentes += 1
        else:
            split.produzidos += 1
        if status_of(tracking) == TC_FINALIZADO:
            split.pecas += tracking.quantity or 0
    return result


def productivity_for_day(
    trackings: Iterable[Tracking],
    day: date,
    tz,
) -> dict[str, UserProductivity]:
    """Quantidade de rastreios e peças por responsável, finalizados no dia."""
    result: dict[str, UserProductivity] = defaultdict(UserProductivity)
    for tracking in trackings:
        if local_date(tracking.completed_at, tz) != day:
            continue
        entry = result[tracking.user or NO_USER_LABEL]
        entry.count += 1
        entry.quantity += tracking.quantity or 0
    return dict(result)


def daily_series(
    trackings: Iterable[Tracking],
    today: date,
    tz,
    days: int = TREND_DAYS,
) -> list[DailyPoint]:
    """Série dos últimos `days` dias (do mais antigo até hoje, inclusive)."""
    points = {
        today - timedelta(days=offset): DailyPoint(dia=today - timedelta(days=offset))
        for offset in range(days - 1, -1, -1)
    }

    for tracking in trackings:
        received = points.get(local_date(tracking.received_at, tz))
        if received is not None:
            received.recebidos += 1

        completed = points.get(local_date(tracking.completed_at, tz))
        if completed is not None:
            completed.pecas += tracking.quantity or 0
            if status_of(tracking) == TC_FINALIZADO:
                completed.finalizados += 1

    return sorted(points.values(), key=lambda p: p.dia)


def build_summary(
    trackings: Sequence[Tracking],
    filters: Optional[TrackingFilters] = None,
    now: Optional[datetime] = None,
    tz=None,
) -> ReportSummary:
    """Monta o resumo completo do dashboard sobre os rastreios filtrados."""
    tz = tz or local_tz()
    today = to_local(now or datetime.now(UTC), tz).date()
    selected = filter_trackings(trackings, filters or TrackingFilters(), tz)

    by_status = defaultdict(int)
    by_type = defaultdict(int)
    for tracking in selected:
        by_status[status_of(tracking)] += 1
        by_type[type_of(tracking)] += 1

    return ReportSummary(
        total=len(selected),
        pendente=by_status[PENDENTE],
        finalizado=by_status[TC_FINALIZADO],
        cancelado=by_status[TrackingStatus.CANCELADO.value],
        divergencia=by_status[TrackingStatus.DIVERGENCIA.value],
        reversa=by_type[StatusRastreio.NORMAL.value],
        insucesso=by_type[StatusRastreio.INSUCESSO.value],
        por_tipo=split_by_type(selected),
        produtividade_hoje=productivity_for_day(selected, today, tz),
        ultimos_7_dias=daily_series(selected, today, tz),
    )
