# --------------------------------------------------------------
# File: crypto_mac.py
# Description: Cálculo y verificación de etiquetas HMAC-SHA256.
# --------------------------------------------------------------
"""Autenticación de mensajes para la construcción cifrar-y-luego-MAC."""

from cryptography.hazmat.primitives import hashes, hmac

from secseal.secure_memory import constant_time_equals, wipe

__all__ = ["MAC_LENGTH", "compute_mac", "verify_mac"]

MAC_LENGTH = 32


def compute_mac(data: bytes, key: bytes) -> bytes:
    """Calcula HMAC-SHA256 sobre ``data``.

    Args:
        data (bytes): Datos a autenticar.
        key (bytes): Clave HMAC (32 bytes en todos los formatos).

    Returns:
        bytes: Etiqueta de 32 bytes.

    """

    mac = hmac.HMAC(bytes(key), hashes.SHA256())
    mac.update(bytes(data))
    return mac.finalize()


def verify_mac(data: bytes, key: bytes, expected: bytes) -> bool:
    """Verifica una etiqueta HMAC-SHA256 en tiempo constante.

    La longitud de ``expected`` se comprueba primero: no es secreta y permite
    rechazar sin calcular el HMAC. La etiqueta recién calculada se borra tras
    la comparación.

    Args:
        data (bytes): Datos autenticados.
        key (bytes): Clave HMAC.
        expected (bytes): Etiqueta recibida.

    Returns:
        bool: ``True`` si la etiqueta coincide.

    """

    if expected is None or len(expected) != MAC_LENGTH:
        return False

    actual = bytearray(compute_mac(data, key))
    try:
        return constant_time_equals(actual, expected)
    finally:
        wipe(actual)
