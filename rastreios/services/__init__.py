"""Regras de negócio (persistência, autenticação e relatórios)."""
