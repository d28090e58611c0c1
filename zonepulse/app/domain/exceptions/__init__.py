from zonepulse.app.domain.exceptions.domain_errors import (
    DomainError,
    EngineStateError,
    InvalidCandleError,
    InvalidTickError,
)

__all__ = [
    "DomainError",
    "EngineStateError",
    "InvalidCandleError",
    "InvalidTickError",
]
