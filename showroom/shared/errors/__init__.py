from .base import (
    AppError,
    DomainError,
    InfrastructureError,
    PersistenceError,
    RateLimitedError,
    UpstreamError,
    ValidationError,
)
from .http import handle_app_error, register_error_handler

__all__ = [
    "AppError",
    "DomainError",
    "InfrastructureError",
    "PersistenceError",
    "RateLimitedError",
    "UpstreamError",
    "ValidationError",
    "handle_app_error",
    "register_error_handler",
]
