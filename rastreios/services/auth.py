"""Serviço de autenticação: senhas, sessões e usuários."""

import hashlib
import hmac
import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Optional

import jwt
from sqlalchemy.orm import Session

from ..config import settings
from ..models import User, UserSession

logger = logging.getLogger(__name__)

# Configurações JWT do cookie de sessão
JWT_SECRET = settings.secret_key
JWT_ALGORITHM = "HS256"
SESSION_TOKEN_TYPE = "session"

# Parâmetros do scrypt (mesmos padrões do Node, compatível com senhas já gravadas)
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_KEY_LEN = 64
SALT_BYTES = 16
HASH_SEPARATOR = "."


# =============================================================================
# FUNÇÕES DE HASH
# =============================================================================

def _scrypt(password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        password.encode(),
        salt=salt.encode(),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_KEY_LEN,
    )


def hash_password(password: str) -> str:
    """Gera o hash scrypt no formato `<hashHex>.<saltHex>`."""
    salt = secrets.token_hex(SALT_BYTES)
    return f"{_scrypt(password, salt).hex()}{HASH_SEPARATOR}{salt}"


def verify_password(password: str, stored: str) -> bool:
    """Verifica se a senha corresponde ao hash (comparação em tempo constante)."""
    if not stored or HASH_SEPARATOR not in stored:
        return False

    hashed, _, salt = stored.partition(HASH_SEPARATOR)
    if not hashed or not salt:
        return False

    try:
        expected = bytes.fromhex(hashed)
    except ValueError:
        return False

    return hmac.compare_digest(expected, _scrypt(password, salt))


# =============================================================================
# FUNÇÕES JWT
# =============================================================================

def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def create_session_token(user_id: str, session_id: str, expires_at: datetime) -> str:
    """Assina o valor do cookie de sessão."""
    payload = {
        "sub": user_id,
        "sid": session_id,
        "type": SESSION_TOKEN_TYPE,
        "exp": expires_at,
        "iat": datetime.now(UTC),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_session_token(token: str) -> Optional[dict]:
    """Decodifica e valida o cookie de sessão."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

    if payload.get("type") != SESSION_TOKEN_TYPE or not payload.get("sid"):
        return None
    return payload


# =============================================================================
# SERVIÇO DE AUTENTICAÇÃO
# =============================================================================

class AuthService:
    """Serviço para operações de autenticação."""

    def __init__(self, db: Session):
        self.db = db

    def authenticate(self, login: str, password: str) -> Optional[User]:
        """Autentica um usuário por login e senha."""
        user = self.get_user_by_login(login)
        if not user:
            return None

        if not verify_password(password, user.password):
            return None

        return user

    def create_session(
        self,
        user: User,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> tuple[UserSession, str]:
        """
        Cria uma nova sessão para o usuário.

        Retorna: (sessão, valor assinado do cookie)
        """
        expires_at = datetime.now(UTC) + timedelta(hours=settings.session_max_age_hours)
        session = UserSession(
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent[:255] if user_agent else None,
            expires_at=expires_at,
        )
        self.db.add(session)
        self.db.commit()

        token = create_session_token(user.id, session.id, expires_at)
        return session, token

    def get_session_user(self, token: str) -> Optional[User]:
        """Resolve o usuário a partir do cookie, validando a sessão no banco."""
        payload = decode_session_token(token)
        if not payload:
            return None

        session = self.db.get(UserSession, payload["sid"])
        if not session or session.user_id != payload.get("sub"):
            return None

        if _aware(session.expires_at) < datetime.now(UTC):
            return None

        return self.db.get(User, session.user_id)

    def destroy_session(self, token: str) -> bool:
        """Remove a sessão referenciada pelo cookie, se existir."""
        payload = decode_session_token(token)
        if not payload:
            return False

        deleted = self.db.query(UserSession).filter(
            UserSession.id == payload["sid"]
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted > 0

    def purge_expired_sessions(self) -> int:
        """Remove sessões vencidas."""
        deleted = self.db.query(UserSession).filter(
            UserSession.expires_at < datetime.now(UTC)
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Busca usuário por ID."""
        return self.db.get(User, user_id)

    def get_user_by_login(self, login: str) -> Optional[User]:
        """Busca usuário por login."""
        return self.db.query(User).filter(User.login == login).first()

    def list_users(self) -> list[User]:
        return self.db.query(User).order_by(User.name).all()

    def create_user(self, name: str, login: str, password: str, empresa: str) -> User:
        """Cria um novo usuário com a senha já em hash."""
        user = User(
            name=name,
            login=login,
            password=hash_password(password),
            empresa=empresa,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_user(self, user: User) -> None:
        self.db.delete(user)
        self.db.commit()

    def is_admin(self, user: User) -> bool:
        """Apenas o login administrativo configurado acessa o painel."""
        return user.login == settings.admin_login


def create_initial_user(
    db: Session,
    name: str,
    login: str,
    password: str,
    empresa: str,
) -> Optional[User]:
    """Cria um usuário se o login ainda não existir (usado pelos scripts de bootstrap)."""
    service = AuthService(db)
    if service.get_user_by_login(login):
        return None
    return service.create_user(name=name, login=login, password=password, empresa=empresa)
