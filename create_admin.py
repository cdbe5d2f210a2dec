"""Cria o usuário administrador do painel.

Uso: python create_admin.py [senha] [empresa]
"""

from __future__ import annotations

import sys

from rastreios.config import settings
from rastreios.database import SessionLocal
from rastreios.schemas import Empresa
from rastreios.services.auth import create_initial_user


def main() -> None:
    password = sys.argv[1] if len(sys.argv) >= 2 else "admin"
    empresa = Empresa(sys.argv[2]).value if len(sys.argv) >= 3 else Empresa.INSIDER.value

    db = SessionLocal()
    try:
        user = create_initial_user(
            db,
            name="Administrador",
            login=settings.admin_login,
            password=password,
            empresa=empresa,
        )
        if user is None:
            print(f"Usuário {settings.admin_login} já existe")
            return
        print(f"OK: administrador criado (id={user.id}, login={user.login}, empresa={user.empresa})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
