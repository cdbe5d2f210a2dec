"""Escopo de empresa aplicado a todo acesso aos rastreios."""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Query

from ..models import Tracking


@dataclass(frozen=True)
class CompanyScope:
    """Empresa do usuário logado; `None` quando não há sessão (vê todas)."""

    empresa: Optional[str] = None

    @property
    def is_scoped(self) -> bool:
        return self.empresa is not None

    def apply(self, query: Query) -> Query:
        """Restringe uma query de rastreios à empresa do escopo."""
        if not self.is_scoped:
            return query
        return query.filter(Tracking.empresa == self.empresa)

    def empresa_for_create(self, requested: Optional[str], default: str) -> str:
        """Com sessão a empresa é sempre a do usuário, ignorando o cliente."""
        if self.is_scoped:
            return self.empresa
        return requested or default


UNSCOPED = CompanyScope()
