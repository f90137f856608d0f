# --------------------------------------------------------------
# File: formats.py
# Description: Serialización y análisis de los formatos textuales SCS1, SCSPK1 y SCSIG1.
# --------------------------------------------------------------
"""Códec de sobres delimitados por ``$``.

Gramáticas (sensibles a mayúsculas, orden de campos fijo)::

    SCS1$kdf=PBKDF2-SHA1$iter=<uint>$salt=<b64>$IV=<b64>$ct=<b64>$mac=<b64>
    SCSPK1$kid=<hex>$ek=<b64>$iv=<b64>$ct=<b64>$mac=<b64>
    SCSIG1$kdf=PBKDF2-SHA1$iter=<uint>$salt=<b64>$sig=<b64>

Los errores estructurales (prefijo, campos, Base64, KDF) lanzan
:class:`FormatError`; los valores bien formados que incumplen mínimos lanzan
:class:`PolicyViolation`. El contenido de ``mac``/``sig`` nunca se valida aquí.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Dict, List, Sequence

from secseal.config import MIN_ITERATIONS
from secseal.crypto_kdf import KDF_IDENTIFIER
from secseal.crypto_mac import MAC_LENGTH
from secseal.crypto_sym import BLOCK_SIZE, IV_LENGTH
from secseal.errors import FormatError, PolicyViolation
from secseal.models import Scs1Envelope, Scsig1Signature, Scspk1Envelope

__all__ = [
    "SCS1_PREFIX",
    "SCSPK1_PREFIX",
    "SCSIG1_PREFIX",
    "MIN_SALT_LENGTH",
    "b64encode",
    "b64decode",
    "detect_format",
    "build_scs1",
    "parse_scs1",
    "build_scspk1",
    "parse_scspk1",
    "scspk1_mac_input",
    "build_scsig1",
    "parse_scsig1",
]

SCS1_PREFIX = "SCS1"
SCSPK1_PREFIX = "SCSPK1"
SCSIG1_PREFIX = "SCSIG1"

MIN_SALT_LENGTH = 16
MAX_ITERATIONS = 0xFFFFFFFF

SCS1_FIELDS = ("kdf", "iter", "salt", "IV", "ct", "mac")
SCSPK1_FIELDS = ("kid", "ek", "iv", "ct", "mac")
SCSIG1_FIELDS = ("kdf", "iter", "salt", "sig")

KEY_ID_PATTERN = re.compile(r"^[0-9A-F]{40}$")


# ----------------------------------------------------------------- helpers

def b64encode(data: bytes) -> str:
    """Codifica en Base64 estándar con relleno."""

    return base64.b64encode(bytes(data)).decode("ascii")


def b64decode(value: str, field: str) -> bytes:
    """Decodifica Base64 estándar de forma estricta.

    Raises:
        FormatError: Si el valor contiene caracteres fuera del alfabeto o relleno incorrecto.

    """

    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise FormatError(f"Base64 inválido en el campo '{field}'.") from exc


def detect_format(text: str) -> str:
    """Devuelve el identificador de formato según el prefijo de la cadena.

    Raises:
        FormatError: Si el prefijo no corresponde a ningún formato conocido.

    """

    if not isinstance(text, str) or not text.strip():
        raise FormatError("La cadena del sobre no puede estar vacía.")
    prefix = text.strip().split("$", 1)[0]
    if prefix in (SCS1_PREFIX, SCSPK1_PREFIX, SCSIG1_PREFIX):
        return prefix
    raise FormatError(f"Formato de sobre desconocido: '{prefix[:16]}'.")


def _split_fields(text: str, prefix: str, expected: Sequence[str]) -> Dict[str, str]:
    """Separa la cadena en ``clave=valor`` comprobando prefijo y conjunto de claves."""

    if not isinstance(text, str) or not text.strip():
        raise FormatError("La cadena del sobre no puede estar vacía.")

    parts = text.strip().split("$")
    if len(parts) < 2 or parts[0] != prefix:
        raise FormatError(f"Formato inválido. Se esperaba '{prefix}$...' pero se recibió '{parts[0][:16]}$...'.")

    fields: Dict[str, str] = {}
    for segment in parts[1:]:
        key, sep, value = segment.partition("=")
        if not sep or not key:
            raise FormatError(f"Segmento mal formado en {prefix}: se esperaba 'clave=valor'.")
        if key not in expected:
            raise FormatError(f"Campo desconocido en {prefix}: '{key}'.")
        if key in fields:
            raise FormatError(f"Campo duplicado en {prefix}: '{key}'.")
        fields[key] = value

    missing: List[str] = [name for name in expected if name not in fields]
    if missing:
        raise FormatError(f"Faltan campos obligatorios en {prefix}: {', '.join(missing)}.")
    return fields


def _parse_kdf(fields: Dict[str, str]) -> None:
    if fields["kdf"] != KDF_IDENTIFIER:
        raise FormatError(f"KDF no soportada: '{fields['kdf']}'. Se esperaba '{KDF_IDENTIFIER}'.")


def _parse_iterations(fields: Dict[str, str]) -> int:
    value = fields["iter"]
    if not value.isascii() or not value.isdigit():
        raise FormatError(f"Número de iteraciones inválido: '{value}'.")
    iterations = int(value)
    if iterations > MAX_ITERATIONS:
        raise FormatError(f"Número de iteraciones fuera de rango: {iterations}.")
    return iterations


# ------------------------------------------------------------ invariantes

def _check_iterations(iterations: int) -> None:
    if iterations < MIN_ITERATIONS:
        raise PolicyViolation(
            f"Las iteraciones deben ser >= {MIN_ITERATIONS}. Recibido: {iterations}"
        )


def _check_salt(salt: bytes) -> None:
    if len(salt) < MIN_SALT_LENGTH:
        raise PolicyViolation(
            f"La sal debe tener al menos {MIN_SALT_LENGTH} bytes. Recibido: {len(salt)}"
        )


def _check_iv(iv: bytes) -> None:
    if len(iv) != IV_LENGTH:
        raise PolicyViolation(f"El IV debe tener exactamente {IV_LENGTH} bytes. Recibido: {len(iv)}")


def _check_ciphertext(ciphertext: bytes) -> None:
    if not ciphertext or len(ciphertext) % BLOCK_SIZE:
        raise PolicyViolation(
            f"El ciphertext debe ser no vacío y múltiplo de {BLOCK_SIZE} bytes. Recibido: {len(ciphertext)}"
        )


def _check_tag(tag: bytes, name: str) -> None:
    if len(tag) != MAC_LENGTH:
        raise PolicyViolation(
            f"{name} debe tener exactamente {MAC_LENGTH} bytes (HMAC-SHA256). Recibido: {len(tag)}"
        )


def _check_key_id(key_id: str) -> None:
    if not KEY_ID_PATTERN.match(key_id):
        raise FormatError("El identificador de clave debe ser una huella SHA-1 en hexadecimal mayúsculas.")


# -------------------------------------------------------------------- SCS1

def build_scs1(envelope: Scs1Envelope) -> str:
    """Serializa un sobre SCS1 tras validar sus invariantes.

    Raises:
        PolicyViolation: Si algún campo incumple los mínimos del formato.

    """

    _check_iterations(envelope.iterations)
    _check_salt(envelope.salt)
    _check_iv(envelope.iv)
    _check_ciphertext(envelope.ciphertext)
    _check_tag(envelope.mac, "El MAC")

    return "$".join(
        [
            SCS1_PREFIX,
            f"kdf={KDF_IDENTIFIER}",
            f"iter={envelope.iterations}",
            f"salt={b64encode(envelope.salt)}",
            f"IV={b64encode(envelope.iv)}",
            f"ct={b64encode(envelope.ciphertext)}",
            f"mac={b64encode(envelope.mac)}",
        ]
    )


def parse_scs1(text: str) -> Scs1Envelope:
    """Interpreta una cadena SCS1 en un :class:`Scs1Envelope`."""

    fields = _split_fields(text, SCS1_PREFIX, SCS1_FIELDS)
    _parse_kdf(fields)
    iterations = _parse_iterations(fields)
    salt = b64decode(fields["salt"], "salt")
    iv = b64decode(fields["IV"], "IV")
    ciphertext = b64decode(fields["ct"], "ct")
    mac = b64decode(fields["mac"], "mac")

    _check_iterations(iterations)
    _check_salt(salt)
    _check_iv(iv)
    _check_ciphertext(ciphertext)
    _check_tag(mac, "El MAC")

    return Scs1Envelope(iterations=iterations, salt=salt, iv=iv, ciphertext=ciphertext, mac=mac)


# ------------------------------------------------------------------ SCSPK1

def scspk1_mac_input(key_id: str, encrypted_session_key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """Concatenación textual canónica autenticada por el MAC de SCSPK1.

    A diferencia de SCS1, el MAC cubre la cabecera completa para impedir la
    sustitución del identificador de clave.
    """

    header = "$".join(
        [
            SCSPK1_PREFIX,
            f"kid={key_id}",
            f"ek={b64encode(encrypted_session_key)}",
            f"iv={b64encode(iv)}",
            f"ct={b64encode(ciphertext)}",
        ]
    )
    return header.encode("utf-8")


def build_scspk1(envelope: Scspk1Envelope) -> str:
    """Serializa un sobre SCSPK1 tras validar sus invariantes."""

    _check_key_id(envelope.key_id)
    if not envelope.encrypted_session_key:
        raise PolicyViolation("La clave de sesión cifrada no puede estar vacía.")
    _check_iv(envelope.iv)
    _check_ciphertext(envelope.ciphertext)
    _check_tag(envelope.mac, "El MAC")

    header = scspk1_mac_input(
        envelope.key_id, envelope.encrypted_session_key, envelope.iv, envelope.ciphertext
    ).decode("utf-8")
    return f"{header}$mac={b64encode(envelope.mac)}"


def parse_scspk1(text: str) -> Scspk1Envelope:
    """Interpreta una cadena SCSPK1 en un :class:`Scspk1Envelope`."""

    fields = _split_fields(text, SCSPK1_PREFIX, SCSPK1_FIELDS)
    key_id = fields["kid"]
    _check_key_id(key_id)
    encrypted_session_key = b64decode(fields["ek"], "ek")
    iv = b64decode(fields["iv"], "iv")
    ciphertext = b64decode(fields["ct"], "ct")
    mac = b64decode(fields["mac"], "mac")

    if not encrypted_session_key:
        raise PolicyViolation("La clave de sesión cifrada no puede estar vacía.")
    _check_iv(iv)
    _check_ciphertext(ciphertext)
    _check_tag(mac, "El MAC")

    return Scspk1Envelope(
        key_id=key_id,
        encrypted_session_key=encrypted_session_key,
        iv=iv,
        ciphertext=ciphertext,
        mac=mac,
    )


# ------------------------------------------------------------------ SCSIG1

def build_scsig1(signature: Scsig1Signature) -> str:
    """Serializa una firma SCSIG1 tras validar sus invariantes."""

    _check_iterations(signature.iterations)
    _check_salt(signature.salt)
    _check_tag(signature.signature, "La firma")

    return "$".join(
        [
            SCSIG1_PREFIX,
            f"kdf={KDF_IDENTIFIER}",
            f"iter={signature.iterations}",
            f"salt={b64encode(signature.salt)}",
            f"sig={b64encode(signature.signature)}",
        ]
    )


def parse_scsig1(text: str) -> Scsig1Signature:
    """Interpreta una cadena SCSIG1 en un :class:`Scsig1Signature`."""

    fields = _split_fields(text, SCSIG1_PREFIX, SCSIG1_FIELDS)
    _parse_kdf(fields)
    iterations = _parse_iterations(fields)
    salt = b64decode(fields["salt"], "salt")
    signature = b64decode(fields["sig"], "sig")

    _check_iterations(iterations)
    _check_salt(salt)
    _check_tag(signature, "La firma")

    return Scsig1Signature(iterations=iterations, salt=salt, signature=signature)
