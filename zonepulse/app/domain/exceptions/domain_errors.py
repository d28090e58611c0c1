"""
ZonePulse – Domain Exceptions
==============================
Excepciones específicas del dominio de análisis.

Estas excepciones capturan errores de lógica de negocio,
NO errores técnicos (esos van en infrastructure).

JERARQUÍA:
    DomainError (base)
    ├── InvalidCandleError
    ├── InvalidTickError
    └── EngineStateError
"""

from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Excepción base para errores de dominio."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
        }


class InvalidCandleError(DomainError):
    """Vela que viola el invariante low ≤ open/close ≤ high."""

    def __init__(self, message: str, timestamp: Optional[float] = None):
        super().__init__(message, code="INVALID_CANDLE")
        self.timestamp = timestamp


class InvalidTickError(DomainError):
    """Trade del feed sin precio/timestamp utilizable."""

    def __init__(self, message: str):
        super().__init__(message, code="INVALID_TICK")


class EngineStateError(DomainError):
    """Operación ilegal para el estado actual del motor (p.ej. backfill doble)."""

    def __init__(self, message: str):
        super().__init__(message, code="ENGINE_STATE")
