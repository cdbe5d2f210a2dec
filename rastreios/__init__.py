"""Controle de rastreios de logística reversa."""

__version__ = "1.0.0"
