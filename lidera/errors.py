# lidera/errors.py
"""
Error taxonomy and the single translation point to user-facing messages.

Store failures are raised as StoreError with one of the ErrorCode values.
Pages never format messages themselves; they call notify_error(), which
logs the failure and shows a non-blocking toast. Nothing here retries.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import streamlit as st
from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError, SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorCode:
    PERMISSION_DENIED = "permission-denied"
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not-found"
    ALREADY_EXISTS = "already-exists"
    FAILED_PRECONDITION = "failed-precondition"
    RESOURCE_EXHAUSTED = "resource-exhausted"
    UNKNOWN = "unknown"


USER_MESSAGES: Dict[str, str] = {
    ErrorCode.PERMISSION_DENIED: "Você não tem permissão para realizar esta ação.",
    ErrorCode.UNAUTHENTICATED: "Você precisa estar autenticado para realizar esta ação.",
    ErrorCode.NOT_FOUND: "Registro não encontrado.",
    ErrorCode.ALREADY_EXISTS: "Este registro já existe.",
    ErrorCode.FAILED_PRECONDITION: "Operação não pode ser realizada no momento.",
    ErrorCode.RESOURCE_EXHAUSTED: "Limite de recursos excedido. Tente novamente mais tarde.",
    ErrorCode.UNKNOWN: "Ocorreu um erro inesperado.",
}


class StoreError(Exception):
    """Failure raised by the document store and the services above it."""

    def __init__(self, code: str, message: str = None, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message or USER_MESSAGES.get(code, USER_MESSAGES[ErrorCode.UNKNOWN])
        self.details = details
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"StoreError({self.code!r}, {self.message!r})"


@dataclass
class AppError:
    code: str
    message: str
    details: Any = None


def from_sqlalchemy(exc: SQLAlchemyError, operation: str = "") -> StoreError:
    """Map a SQLAlchemy failure onto the store taxonomy."""
    details = {"operation": operation, "error": str(exc)}
    if isinstance(exc, IntegrityError):
        return StoreError(ErrorCode.ALREADY_EXISTS, details=details)
    if isinstance(exc, PoolTimeoutError):
        return StoreError(ErrorCode.RESOURCE_EXHAUSTED, details=details)
    if isinstance(exc, OperationalError):
        return StoreError(
            ErrorCode.FAILED_PRECONDITION,
            "Banco de dados indisponível no momento. Tente novamente.",
            details=details,
        )
    return StoreError(ErrorCode.UNKNOWN, details=details)


def translate_error(error: Any) -> AppError:
    """Convert any failure into an AppError with a user-facing message."""
    if isinstance(error, StoreError):
        return AppError(code=error.code, message=error.message, details=error.details)

    if isinstance(error, SQLAlchemyError):
        return translate_error(from_sqlalchemy(error))

    if isinstance(error, Exception):
        return AppError(
            code="error",
            message=str(error) or USER_MESSAGES[ErrorCode.UNKNOWN],
            details=error,
        )

    return AppError(code=ErrorCode.UNKNOWN, message=USER_MESSAGES[ErrorCode.UNKNOWN], details=error)


def get_user_message(error: Any) -> str:
    return translate_error(error).message


def log_error(error: AppError, context: str = None):
    prefix = f"[{context}] " if context else ""
    logger.error(f"{prefix}{error.code}: {error.message}", extra={"details": repr(error.details)})


def notify_error(error: Any, context: str = None) -> AppError:
    """Log the failure and show it as a toast; the page stays interactive."""
    app_error = translate_error(error)
    log_error(app_error, context)
    st.toast(f"❌ {app_error.message}")
    return app_error


__all__ = [
    'ErrorCode',
    'StoreError',
    'AppError',
    'USER_MESSAGES',
    'from_sqlalchemy',
    'translate_error',
    'get_user_message',
    'log_error',
    'notify_error',
]
