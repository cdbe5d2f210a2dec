"""Router para nomes customizados de responsáveis."""

import logging

from fastapi import APIRouter, HTTPException

from ..database import DbSession
from ..schemas import NameCreate, NameOut
from ..services.names import NameRegistry

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[NameOut])
def list_names(db: DbSession):
    """Lista os nomes em ordem alfabética."""
    return NameRegistry(db).list()


@router.post("", response_model=NameOut, status_code=201)
def create_name(payload: NameCreate, db: DbSession):
    """Guarda um nome digitado na finalização (duplicados são aceitos)."""
    name = NameRegistry(db).create(payload.users)
    logger.info(f"Nome criado: {name.users}")
    return name


@router.delete("/{name_id}", status_code=204)
def delete_name(name_id: str, db: DbSession):
    registry = NameRegistry(db)
    name = registry.get(name_id)
    if not name:
        raise HTTPException(status_code=404, detail="Nome não encontrado")
    registry.delete(name)
