"""Models SQLAlchemy do controle de rastreios."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base


def utc_now() -> datetime:
    """Retorna datetime atual em UTC."""
    return datetime.now(UTC)


def new_id() -> str:
    """Gera um identificador opaco (UUID4 em texto)."""
    return str(uuid.uuid4())


# =============================================================================
# AUTENTICAÇÃO
# =============================================================================


class User(Base):
    """Modelo para usuários do sistema."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    login = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # <hashHex>.<saltHex>
    empresa = Column(String(50), nullable=False)

    # Relationships
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")


class UserSession(Base):
    """Sessão autenticada guardada no banco (referenciada pelo cookie)."""

    __tablename__ = "user_sessions"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ip_address = Column(String(45), nullable=True)  # IPv4 ou IPv6
    user_agent = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="sessions")


# =============================================================================
# RASTREIOS
# =============================================================================


class Tracking(Base):
    """Código de rastreio recebido e seu andamento."""

    __tablename__ = "trackings"

    id = Column(String(36), primary_key=True, default=new_id)
    tracking_code = Column(Text, nullable=False, index=True)  # não é único
    received_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    status = Column(String(20), nullable=False, default="PENDENTE")
    completed_at = Column(DateTime(timezone=True), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)  # peças
    user = Column(Text, nullable=True)  # nome livre de quem tratou
    empresa = Column(String(50), nullable=False, default="DEFAULT")
    status_rastreio = Column(String(20), nullable=False, default="normal")  # normal | insucesso

    __table_args__ = (
        Index("ix_trackings_empresa_received_at", "empresa", "received_at"),
    )


class Name(Base):
    """Nome customizado usado como sugestão na finalização."""

    __tablename__ = "name"

    id = Column(String(36), primary_key=True, default=new_id)
    users = Column(Text, nullable=False)
