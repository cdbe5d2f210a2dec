"""Router para cadastro de usuários (painel administrativo)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError

from ..database import DbSession
from ..models import User
from ..schemas import UserCreate, UserOut
from ..services.auth import AuthService
from .auth import require_admin

logger = logging.getLogger(__name__)
router = APIRouter()

LOGIN_EXISTS = "Login já existe"


@router.get("", response_model=list[UserOut])
def list_users(db: DbSession):
    """Lista usuários ordenados por nome, sem a senha."""
    return AuthService(db).list_users()


@router.post("", response_model=UserOut, status_code=201)
def create_user(payload: UserCreate, db: DbSession):
    """Cria um usuário; o login precisa ser único."""
    service = AuthService(db)
    if service.get_user_by_login(payload.login):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=LOGIN_EXISTS)

    try:
        user = service.create_user(
            name=payload.name,
            login=payload.login,
            password=payload.password,
            empresa=payload.empresa.value,
        )
    except IntegrityError:
        # outro request criou o mesmo login entre a consulta e o insert
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=LOGIN_EXISTS)

    logger.info(f"Usuário criado: {user.login} ({user.empresa})")
    return user


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: str, db: DbSession, admin: User = Depends(require_admin)):
    """Remove um usuário (apenas administrador)."""
    service = AuthService(db)
    user = service.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="O administrador não pode remover a si mesmo")

    service.delete_user(user)
    logger.info(f"Usuário removido: {user.login} por {admin.login}")
