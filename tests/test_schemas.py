"""Testes para schemas Pydantic."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from rastreios.schemas import (
    Empresa,
    StatusRastreio,
    TrackingCreate,
    TrackingOut,
    TrackingStatus,
    TrackingUpdate,
    UserCreate,
    clean_tracking_code,
)


class TestCleanTrackingCode:
    """Testes para limpeza do código lido pelo scanner."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("BR123", "BR123"),
            ("ABC123$EXTRA", "ABC123"),
            ("ABC123$", "ABC123"),
            ("  BR123  ", "BR123"),
            ("A$B$C", "A"),
            ("$ABC", ""),
        ],
    )
    def test_clean(self, raw, expected):
        assert clean_tracking_code(raw) == expected


class TestTrackingCreate:
    """Testes para schema de entrada de rastreio."""

    def test_accepts_camel_case(self):
        data = TrackingCreate.model_validate({"trackingCode": "BR1$X", "statusRastreio": "insucesso"})
        assert data.tracking_code == "BR1"
        assert data.status_rastreio == StatusRastreio.INSUCESSO

    def test_status_rastreio_defaults_to_normal(self):
        assert TrackingCreate(tracking_code="BR1").status_rastreio == StatusRastreio.NORMAL
        assert TrackingCreate(tracking_code="BR1", status_rastreio=None).status_rastreio == StatusRastreio.NORMAL

    def test_empty_code(self):
        with pytest.raises(ValidationError) as exc_info:
            TrackingCreate(tracking_code="  $123")
        assert "Código de rastreio é obrigatório" in str(exc_info.value)


class TestTrackingUpdate:
    """Testes para a atualização parcial."""

    def test_changes_only_sent_fields(self):
        update = TrackingUpdate.model_validate({"quantity": 3})
        assert update.changes() == {"quantity": 3}

    def test_null_user_is_kept(self):
        update = TrackingUpdate.model_validate({"user": None, "status": None})
        assert update.changes() == {"user": None}

    def test_negative_quantity(self):
        with pytest.raises(ValidationError):
            TrackingUpdate(quantity=-1)

    def test_invalid_status(self):
        with pytest.raises(ValidationError):
            TrackingUpdate.model_validate({"status": "FINALIZADO"})


class TestTrackingOut:
    def test_naive_dates_become_utc(self, tracking_factory):
        tracking = tracking_factory(
            code="BR1",
            received_at=datetime(2026, 10, 19, 12, 0),
            completed_at=datetime(2026, 10, 19, 13, 0),
            status="TC_FINALIZADO",
        )
        out = TrackingOut.model_validate(tracking)
        assert out.received_at.utcoffset().total_seconds() == 0
        data = out.model_dump(by_alias=True, mode="json")
        assert data["trackingCode"] == "BR1"
        assert data["completedAt"].startswith("2026-10-19T13:00:00")


class TestUserCreate:
    def test_strips_text(self):
        user = UserCreate(name=" Ana ", login=" ana ", password="123", empresa="insider")
        assert user.name == "Ana"
        assert user.login == "ana"
        assert user.empresa == Empresa.INSIDER

    def test_blank_login(self):
        with pytest.raises(ValidationError):
            UserCreate(name="Ana", login="   ", password="123", empresa="insider")


class TestEnums:
    """Testes para os valores gravados no banco."""

    def test_status_values(self):
        assert [s.value for s in TrackingStatus] == [
            "PENDENTE",
            "TC_FINALIZADO",
            "CANCELADO",
            "DIVERGENCIA",
        ]

    def test_status_rastreio_values(self):
        assert StatusRastreio.NORMAL.value == "normal"
        assert StatusRastreio.INSUCESSO.value == "insucesso"

    def test_empresa_values(self):
        assert {e.value for e in Empresa} == {"insider", "alcance_jeans", "modab"}
