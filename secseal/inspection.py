# --------------------------------------------------------------
# File: inspection.py
# Description: Lectura de metadatos de sobres sin passphrase ni material de clave.
# --------------------------------------------------------------
"""Auditoría de sobres: iteraciones, longitudes y tamaño estimado del claro."""

from typing import List, Optional, Tuple

from secseal.crypto_kdf import KDF_IDENTIFIER
from secseal.crypto_sym import BLOCK_SIZE
from secseal.formats import (
    MIN_SALT_LENGTH,
    SCS1_PREFIX,
    SCSIG1_PREFIX,
    SCSPK1_PREFIX,
    detect_format,
    parse_scs1,
    parse_scsig1,
    parse_scspk1,
)
from secseal.models import EnvelopeMetadata

__all__ = ["RECOMMENDED_ITERATIONS", "estimate_plaintext_size", "inspect"]

RECOMMENDED_ITERATIONS = 100000
CIPHER_NAME = "AES-256-CBC"


def estimate_plaintext_size(ciphertext_length: int) -> Tuple[int, int]:
    """Rango de tamaños posibles del texto en claro para AES-CBC con PKCS7.

    El relleno añade entre 1 y 16 bytes, así que el claro mide entre
    ``n - 16`` y ``n - 1`` bytes.
    """

    if ciphertext_length < BLOCK_SIZE:
        return 0, 0
    return ciphertext_length - BLOCK_SIZE, ciphertext_length - 1


def _recommendations(iterations: Optional[int], salt_length: Optional[int]) -> List[str]:
    notes: List[str] = []
    if iterations is not None and iterations < RECOMMENDED_ITERATIONS:
        notes.append(
            f"[!] Iteraciones por debajo de {RECOMMENDED_ITERATIONS} (actual: {iterations}). "
            "Considera volver a sellar con más iteraciones."
        )
    if salt_length is not None and salt_length < MIN_SALT_LENGTH:
        notes.append(
            f"[!] Sal menor de {MIN_SALT_LENGTH} bytes (actual: {salt_length})."
        )
    return notes


def inspect(envelope: str) -> EnvelopeMetadata:
    """Devuelve los metadatos de un sobre SCS1, SCSPK1 o firma SCSIG1.

    Args:
        envelope (str): Cadena a auditar.

    Returns:
        EnvelopeMetadata: Resumen sin ningún secreto.

    Raises:
        FormatError: Si la cadena no es un formato conocido o está mal formada.
        PolicyViolation: Si los campos incumplen los mínimos del formato.

    """

    kind = detect_format(envelope)
    size = len(envelope.strip())

    if kind == SCS1_PREFIX:
        parsed = parse_scs1(envelope)
        low, high = estimate_plaintext_size(len(parsed.ciphertext))
        return EnvelopeMetadata(
            format=SCS1_PREFIX,
            kdf=KDF_IDENTIFIER,
            iterations=parsed.iterations,
            cipher=CIPHER_NAME,
            salt_length=len(parsed.salt),
            iv_length=len(parsed.iv),
            mac_length=len(parsed.mac),
            ciphertext_length=len(parsed.ciphertext),
            estimated_plaintext_min=low,
            estimated_plaintext_max=high,
            envelope_size=size,
            recommendations=_recommendations(parsed.iterations, len(parsed.salt)),
        )

    if kind == SCSPK1_PREFIX:
        parsed = parse_scspk1(envelope)
        low, high = estimate_plaintext_size(len(parsed.ciphertext))
        return EnvelopeMetadata(
            format=SCSPK1_PREFIX,
            key_id=parsed.key_id,
            cipher=CIPHER_NAME,
            iv_length=len(parsed.iv),
            mac_length=len(parsed.mac),
            ciphertext_length=len(parsed.ciphertext),
            encrypted_key_length=len(parsed.encrypted_session_key),
            estimated_plaintext_min=low,
            estimated_plaintext_max=high,
            envelope_size=size,
        )

    parsed = parse_scsig1(envelope)
    return EnvelopeMetadata(
        format=SCSIG1_PREFIX,
        kdf=KDF_IDENTIFIER,
        iterations=parsed.iterations,
        salt_length=len(parsed.salt),
        mac_length=len(parsed.signature),
        envelope_size=size,
        recommendations=_recommendations(parsed.iterations, len(parsed.salt)),
    )
