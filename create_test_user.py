"""Cria um operador de teste para ambientes de desenvolvimento.

Uso: python create_test_user.py [login] [senha] [empresa]
"""

from __future__ import annotations

import sys

from rastreios.database import SessionLocal
from rastreios.schemas import Empresa
from rastreios.services.auth import create_initial_user


def main() -> None:
    login = sys.argv[1] if len(sys.argv) >= 2 else "teste"
    password = sys.argv[2] if len(sys.argv) >= 3 else "123"
    empresa = Empresa(sys.argv[3]).value if len(sys.argv) >= 4 else Empresa.INSIDER.value

    db = SessionLocal()
    try:
        user = create_initial_user(
            db,
            name="Usuário Teste",
            login=login,
            password=password,
            empresa=empresa,
        )
        if user is None:
            print(f"Usuário {login} já existe")
        else:
            print(f"OK: usuário de teste criado (id={user.id})")
        print(f"Empresa: {empresa}")
        print(f"Login: {login}")
        print(f"Senha: {password}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
