"""Exportação dos rastreios em CSV (planilha aberta no Excel)."""

import csv
import io
from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from ..models import Tracking
from ..schemas import StatusRastreio
from .reports import local_tz, status_of, to_local, type_of

UTF8_BOM = "\ufeff"
DATE_FORMAT = "%d/%m/%Y %H:%M:%S"

HEADER = ["Rastreio", "Data Recebido", "Status", "Data Finalização", "Qtd Peças", "Usuário"]
TIPO_COLUMN = "Tipo"


def _format_date(value: Optional[datetime], tz) -> str:
    return to_local(value, tz).strftime(DATE_FORMAT) if value else ""


def _tipo_label(tracking: Tracking) -> str:
    return "INSUCESSO" if type_of(tracking) == StatusRastreio.INSUCESSO.value else "REVERSA"


def export_filename(today: datetime) -> str:
    return f"relatorio_rastreios_{today.strftime('%Y-%m-%d')}.csv"


def trackings_to_csv(
    trackings: Iterable[Tracking],
    include_tipo: bool = True,
    tz=None,
) -> str:
    """Gera o CSV com BOM, todos os campos entre aspas."""
    tz = tz or local_tz()
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")

    writer.writerow(HEADER + [TIPO_COLUMN] if include_tipo else HEADER)
    for tracking in trackings:
        row = [
            tracking.tracking_code,
            _format_date(tracking.received_at, tz),
            status_of(tracking),
            _format_date(tracking.completed_at, tz),
            tracking.quantity or 0,
            tracking.user or "",
        ]
        if include_tipo:
            row.append(_tipo_label(tracking))
        writer.writerow(row)

    return UTF8_BOM + buffer.getvalue()
