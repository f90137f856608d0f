# --------------------------------------------------------------
# File: errors.py
# Description: Taxonomía de errores del motor de sobres autenticados.
# --------------------------------------------------------------
"""Excepciones etiquetadas para distinguir fallos sin comparar mensajes.

Cada excepción expone ``kind`` (:class:`ErrorKind`) para que los llamantes
puedan ramificar por categoría, ya sea con ``except`` o con ``match``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = [
    "ErrorKind",
    "SecSealError",
    "FormatError",
    "PolicyViolation",
    "IntegrityFailure",
    "KeySourceFailure",
    "CryptoBackendFailure",
    "INTEGRITY_MESSAGE",
]

# Mensaje único para manipulación, credencial errónea o fallo de desenvoltura.
INTEGRITY_MESSAGE = "Fallo de integridad del sobre (datos alterados o credencial incorrecta)."


class ErrorKind(str, Enum):
    """Categorías de error expuestas a los llamantes."""

    FORMAT = "format"
    POLICY = "policy"
    INTEGRITY = "integrity"
    KEY_SOURCE = "key_source"
    CRYPTO_BACKEND = "crypto_backend"


class SecSealError(Exception):
    """Error base de SecSeal."""

    kind: ErrorKind = ErrorKind.CRYPTO_BACKEND


class FormatError(SecSealError, ValueError):
    """Cadena de sobre o firma mal formada (prefijo, campos, Base64, KDF)."""

    kind = ErrorKind.FORMAT


class PolicyViolation(SecSealError, ValueError):
    """Valores bien formados que incumplen los mínimos de seguridad."""

    kind = ErrorKind.POLICY


class IntegrityFailure(SecSealError):
    """Verificación de MAC o firma fallida.

    No distingue entre datos manipulados y credencial incorrecta: ambos casos
    son criptográficamente indistinguibles.
    """

    kind = ErrorKind.INTEGRITY

    def __init__(self, message: str = INTEGRITY_MESSAGE) -> None:
        super().__init__(message)


class KeySourceFailure(SecSealError):
    """No se pudo obtener el material de clave de su origen.

    Args:
        message (str): Descripción del problema.
        source (Optional[str]): Origen implicado (variable, fichero, almacén).
    """

    kind = ErrorKind.KEY_SOURCE

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


class CryptoBackendFailure(SecSealError):
    """La primitiva subyacente de ``cryptography`` lanzó un error."""

    kind = ErrorKind.CRYPTO_BACKEND
