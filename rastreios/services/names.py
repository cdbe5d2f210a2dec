"""Registro de nomes customizados para a finalização."""

from typing import Optional

from sqlalchemy.orm import Session

from ..models import Name


class NameRegistry:
    """Sugestões de responsável; duplicados são aceitos."""

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> list[Name]:
        return self.db.query(Name).order_by(Name.users).all()

    def get(self, name_id: str) -> Optional[Name]:
        return self.db.get(Name, name_id)

    def create(self, users: str) -> Name:
        name = Name(users=users)
        self.db.add(name)
        self.db.commit()
        self.db.refresh(name)
        return name

    def delete(self, name: Name) -> None:
        self.db.delete(name)
        self.db.commit()
