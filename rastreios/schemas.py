"""Schemas Pydantic para validação e serialização."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# === Enums ===


class TrackingStatus(str, Enum):
    """Status possíveis de um rastreio."""

    PENDENTE = "PENDENTE"
    TC_FINALIZADO = "TC_FINALIZADO"
    CANCELADO = "CANCELADO"
    DIVERGENCIA = "DIVERGENCIA"


class StatusRastreio(str, Enum):
    """Classificação do rastreio: reversa comum ou insucesso de entrega."""

    NORMAL = "normal"
    INSUCESSO = "insucesso"


class Empresa(str, Enum):
    """Empresas atendidas."""

    INSIDER = "insider"
    ALCANCE_JEANS = "alcance_jeans"
    MODAB = "modab"


# === Validators ===


SCANNER_SUFFIX_DELIMITER = "$"


def clean_tracking_code(raw: str) -> str:
    """Remove o sufixo que leitores de código de barras anexam após o '$'."""
    return raw.split(SCANNER_SUFFIX_DELIMITER, 1)[0].strip()


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite devolve datetimes sem fuso; tudo é gravado em UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class ApiModel(BaseModel):
    """Base dos schemas expostos na API (chaves em camelCase)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# === Tracking Schemas ===


class TrackingCreate(ApiModel):
    """Entrada de um novo rastreio (formulário de bipagem)."""

    tracking_code: str = Field(..., description="Código lido pelo scanner ou digitado")
    user: str | None = Field(None, max_length=255)
    status_rastreio: StatusRastreio = StatusRastreio.NORMAL
    empresa: str | None = Field(None, max_length=50)

    @field_validator("tracking_code")
    @classmethod
    def validate_tracking_code(cls, v: str) -> str:
        """Limpa o sufixo do scanner e exige código não vazio."""
        cleaned = clean_tracking_code(v)
        if not cleaned:
            raise ValueError("Código de rastreio é obrigatório")
        return cleaned

    @field_validator("status_rastreio", mode="before")
    @classmethod
    def default_status_rastreio(cls, v):
        return StatusRastreio.NORMAL if v is None else v


class TrackingUpdate(ApiModel):
    """Atualização parcial feita na finalização."""

    status: TrackingStatus | None = None
    quantity: int | None = Field(None, ge=0)
    user: str | None = Field(None, max_length=255)
    status_rastreio: StatusRastreio | None = None

    def changes(self) -> dict:
        """Campos enviados pelo cliente; nulos só valem para `user`."""
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if v is not None or k == "user"}


class TrackingOut(ApiModel):
    """Schema de saída para rastreio."""

    id: str
    tracking_code: str
    received_at: datetime
    status: TrackingStatus
    completed_at: datetime | None = None
    quantity: int
    user: str | None = None
    empresa: str
    status_rastreio: StatusRastreio

    @field_validator("received_at", "completed_at")
    @classmethod
    def ensure_utc(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)


# === User Schemas ===


class UserCreate(ApiModel):
    """Schema para criação de usuário."""

    name: str = Field(..., min_length=1, max_length=255)
    login: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    empresa: Empresa

    @field_validator("name", "login")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Campo obrigatório")
        return v


class UserOut(ApiModel):
    """Usuário sem a senha."""

    id: str
    name: str
    login: str
    empresa: str


class LoginRequest(ApiModel):
    """Login do operador."""

    empresa: Empresa
    login: str = Field(..., min_length=1, description="Login é obrigatório")
    senha: str = Field(..., min_length=1, description="Senha é obrigatória")


class AdminLoginRequest(ApiModel):
    """Login do painel administrativo."""

    login: str = Field(..., min_length=1)
    senha: str = Field(..., min_length=1)


# === Name Schemas ===


class NameCreate(ApiModel):
    """Nome customizado digitado na finalização."""

    users: str = Field(..., min_length=1, max_length=255)

    @field_validator("users")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Nome é obrigatório")
        return v


class NameOut(ApiModel):
    id: str
    users: str


# === Report Schemas ===


class TypeSplit(ApiModel):
    """Produção de um tipo (reversa ou insucesso)."""

    produzidos: int = 0
    pendentes: int = 0
    pecas: int = 0


class UserProductivity(ApiModel):
    count: int = 0
    quantity: int = 0


class DailyPoint(ApiModel):
    """Um dia da série dos últimos 7 dias."""

    dia: date
    recebidos: int = 0
    finalizados: int = 0
    pecas: int = 0


class ReportSummary(ApiModel):
    """Resumo do dashboard de relatórios."""

    total: int
    pendente: int
    finalizado: int
    cancelado: int
    divergencia: int
    reversa: int
    insucesso: int
    por_tipo: dict[str, TypeSplit]
    produtividade_hoje: dict[str, UserProductivity]
    ultimos_7_dias: list[DailyPoint]


# === Misc ===


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Response do health check."""

    status: str
    db: bool
    version: str = "1.0.0"
