# --------------------------------------------------------------
# File: crypto_sym.py
# Description: Primitivas AES-256-CBC/PKCS7, AES-GCM y generación aleatoria segura.
# --------------------------------------------------------------
"""Rutinas de cifrado simétrico para los sobres y los keyfiles."""

import os
from typing import Optional, Tuple

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from secseal.errors import CryptoBackendFailure, PolicyViolation

__all__ = [
    "BLOCK_SIZE",
    "IV_LENGTH",
    "KEY_LENGTH",
    "random_bytes",
    "aes_cbc_encrypt",
    "aes_cbc_decrypt",
    "aes_gcm_encrypt_with_key",
    "aes_gcm_decrypt_with_key",
]

KEY_LENGTH = 32
IV_LENGTH = 16
BLOCK_SIZE = 16


def random_bytes(length: int) -> bytes:
    """Devuelve ``length`` bytes del CSPRNG del sistema operativo.

    ``os.urandom`` es seguro entre hilos y no mantiene estado en el proceso.
    """

    if length < 1:
        raise PolicyViolation("La longitud aleatoria debe ser de al menos 1 byte.")
    return os.urandom(length)


def _check_key_iv(key: bytes, iv: bytes) -> None:
    """Valida las longitudes de clave e IV para AES-256-CBC."""

    if len(key) != KEY_LENGTH:
        raise PolicyViolation(
            f"La clave debe tener exactamente {KEY_LENGTH} bytes (256 bits). Recibido: {len(key)}"
        )
    if len(iv) != IV_LENGTH:
        raise PolicyViolation(
            f"El IV debe tener exactamente {IV_LENGTH} bytes (128 bits). Recibido: {len(iv)}"
        )


def aes_cbc_encrypt(plaintext: bytes, key: bytes, iv: bytes) -> bytes:
    """Cifra con AES-256-CBC y relleno PKCS7.

    Un texto en claro vacío produce un bloque completo de relleno.

    Args:
        plaintext (bytes): Datos en claro de cualquier longitud.
        key (bytes): Clave de 32 bytes.
        iv (bytes): Vector de inicialización de 16 bytes.

    Returns:
        bytes: Ciphertext múltiplo de 16 bytes.

    """

    _check_key_iv(key, iv)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(bytes(plaintext)) + padder.finalize()
    encryptor = Cipher(algorithms.AES(bytes(key)), modes.CBC(bytes(iv))).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def aes_cbc_decrypt(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    """Descifra AES-256-CBC y retira el relleno PKCS7.

    Args:
        ciphertext (bytes): Datos cifrados, múltiplo de 16 bytes.
        key (bytes): Clave de 32 bytes.
        iv (bytes): Vector de inicialización de 16 bytes.

    Returns:
        bytes: Texto en claro original.

    Raises:
        CryptoBackendFailure: Si el ciphertext no está alineado o el relleno es inválido.
            Los motores lo presentan como ``IntegrityFailure`` para no filtrar
            detalles de relleno.

    """

    _check_key_iv(key, iv)
    if not ciphertext or len(ciphertext) % BLOCK_SIZE:
        raise CryptoBackendFailure("El ciphertext no está alineado al tamaño de bloque.")
    try:
        decryptor = Cipher(algorithms.AES(bytes(key)), modes.CBC(bytes(iv))).decryptor()
        padded = decryptor.update(bytes(ciphertext)) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise CryptoBackendFailure("Relleno PKCS7 inválido.") from exc


def aes_gcm_encrypt_with_key(
    key: bytes, plaintext: bytes, aad: Optional[bytes] = None
) -> Tuple[bytes, bytes, bytes]:
    """Cifra datos con AES-GCM utilizando una clave proporcionada.

    Args:
        key (bytes): Clave simétrica de 128, 192 o 256 bits.
        plaintext (bytes): Datos a cifrar.
        aad (Optional[bytes]): Datos autenticados adicionales.

    Returns:
        Tuple[bytes, bytes, bytes]: Ciphertext sin etiqueta, nonce y tag.

    """

    nonce = os.urandom(12)
    ct_full = AESGCM(key).encrypt(nonce, plaintext, aad)
    return ct_full[:-16], nonce, ct_full[-16:]


def aes_gcm_decrypt_with_key(
    key: bytes, nonce: bytes, ciphertext: bytes, tag: bytes, aad: Optional[bytes] = None
) -> bytes:
    """Descifra datos AES-GCM; lanza ``InvalidTag`` si la autenticación falla."""

    return AESGCM(key).decrypt(nonce, ciphertext + tag, aad)
