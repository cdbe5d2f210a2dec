"""Router para login, logout e sessão do usuário."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import APIKeyCookie
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import settings
from ..database import DbSession
from ..models import User
from ..schemas import AdminLoginRequest, LoginRequest, MessageResponse, UserOut
from ..services.auth import AuthService
from ..services.scope import CompanyScope

logger = logging.getLogger(__name__)
router = APIRouter()
limiter = Limiter(key_func=get_remote_address)
session_cookie = APIKeyCookie(name=settings.session_cookie_name, auto_error=False)


# =============================================================================
# DEPENDÊNCIAS
# =============================================================================

def get_current_user_optional(
    db: DbSession,
    token: Optional[str] = Depends(session_cookie),
) -> Optional[User]:
    """Obtém o usuário da sessão, ou None se não houver sessão válida."""
    if not token:
        return None
    return AuthService(db).get_session_user(token)


def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    """Obtém o usuário da sessão, exigindo autenticação."""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Não autenticado",
        )
    return user


def require_admin(db: DbSession, user: User = Depends(get_current_user)) -> User:
    """Exige sessão do login administrativo."""
    if not AuthService(db).is_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito ao administrador",
        )
    return user


def get_company_scope(user: Optional[User] = Depends(get_current_user_optional)) -> CompanyScope:
    """Escopo de empresa aplicado a todos os acessos aos rastreios."""
    return CompanyScope(empresa=user.empresa if user else None)


# =============================================================================
# HELPERS
# =============================================================================

def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_hours * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="strict" if settings.is_production else "lax",
    )


def _start_session(request: Request, response: Response, service: AuthService, user: User) -> None:
    _, token = service.create_session(
        user,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    _set_session_cookie(response, token)


def _invalid_credentials() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Login ou senha incorretos",
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/login", response_model=UserOut)
@limiter.limit("10/minute")
def login(request: Request, response: Response, data: LoginRequest, db: DbSession):
    """Autentica o operador e abre uma sessão."""
    service = AuthService(db)
    user = service.authenticate(data.login, data.senha)

    if not user:
        logger.warning(f"Falha de login: {data.login} ({_client_ip(request)})")
        raise _invalid_credentials()

    _start_session(request, response, service, user)
    logger.info(f"Login: {user.login} ({user.empresa})")
    return user


@router.post("/admin-login", response_model=UserOut)
@limiter.limit("10/minute")
def admin_login(request: Request, response: Response, data: AdminLoginRequest, db: DbSession):
    """Autentica o administrador; credenciais válidas de outro usuário recebem 403."""
    service = AuthService(db)
    user = service.authenticate(data.login, data.senha)

    if not user:
        logger.warning(f"Falha de login admin: {data.login} ({_client_ip(request)})")
        raise _invalid_credentials()

    if not service.is_admin(user):
        logger.warning(f"Login admin negado para {user.login}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito ao administrador",
        )

    _start_session(request, response, service, user)
    logger.info(f"Login admin: {user.login}")
    return user


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    db: DbSession,
    token: Optional[str] = Depends(session_cookie),
):
    """Encerra a sessão atual (sem erro se não houver sessão)."""
    if token:
        AuthService(db).destroy_session(token)
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="strict" if settings.is_production else "lax",
    )
    return MessageResponse(message="Logout realizado com sucesso")


@router.get("/user", response_model=UserOut)
def current_user(user: User = Depends(get_current_user)):
    """Retorna o usuário da sessão."""
    return user
