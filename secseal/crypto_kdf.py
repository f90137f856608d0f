# --------------------------------------------------------------
# File: crypto_kdf.py
# Description: Derivación de claves PBKDF2 con separación de dominio y KEK Argon2id.
# --------------------------------------------------------------
"""Funciones de derivación de claves a partir de passphrases."""

from typing import Union

from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from secseal.config import MIN_ITERATIONS
from secseal.errors import PolicyViolation
from secseal.secure_memory import SecureBuffer, wipe

__all__ = ["DOMAIN_SEPARATOR", "KDF_IDENTIFIER", "derive_key", "derive_kek", "to_passphrase_bytes"]

KDF_IDENTIFIER = "PBKDF2-SHA1"
DOMAIN_SEPARATOR = b"|scs1|"

Passphrase = Union[bytes, bytearray, str]


def to_passphrase_bytes(passphrase: Passphrase) -> bytearray:
    """Normaliza una passphrase a un ``bytearray`` mutable (UTF-8 para ``str``)."""

    if isinstance(passphrase, str):
        return bytearray(passphrase.encode("utf-8"))
    return bytearray(passphrase)


def derive_key(
    passphrase: Passphrase,
    salt: bytes,
    iterations: int,
    length: int,
) -> SecureBuffer:
    """Deriva material de clave con PBKDF2-HMAC-SHA1 y separación de dominio.

    Antes de derivar se añade ``|scs1|`` a la sal (``salt' = salt || "|scs1|"``)
    para que las claves de este formato no coincidan con claves derivadas para
    otros fines a partir del mismo par sal/passphrase.

    Args:
        passphrase (Passphrase): Passphrase en bytes o texto.
        salt (bytes): Sal base sin el separador.
        iterations (int): Número de iteraciones PBKDF2 (mínimo 10000).
        length (int): Longitud en bytes del material derivado.

    Returns:
        SecureBuffer: Material derivado; el llamante debe borrarlo.

    Raises:
        PolicyViolation: Si las iteraciones o la longitud no son válidas.

    """

    if iterations < MIN_ITERATIONS:
        raise PolicyViolation(
            f"Las iteraciones deben ser >= {MIN_ITERATIONS}. Recibido: {iterations}"
        )
    if length < 1:
        raise PolicyViolation("La longitud de clave debe ser de al menos 1 byte.")

    separated_salt = bytearray(salt) + DOMAIN_SEPARATOR
    secret = to_passphrase_bytes(passphrase)
    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA1(),
            length=length,
            salt=bytes(separated_salt),
            iterations=iterations,
        )
        return SecureBuffer(kdf.derive(bytes(secret)))
    finally:
        wipe(separated_salt)
        wipe(secret)


def derive_kek(
    secret: bytes,
    salt: bytes,
    *,
    t: int = 3,
    m: int = 64 * 1024,
    p: int = 1,
    outlen: int = 32,
) -> bytes:
    """Deriva una clave de cifrado de claves (KEK) usando Argon2id.

    Solo la usan los keyfiles de passphrase; los sobres usan :func:`derive_key`.

    Args:
        secret (bytes): Secreto maestro del usuario.
        salt (bytes): Sal aleatoria asociada al keyfile.
        t (int): Coste temporal en iteraciones Argon2id.
        m (int): Memoria en KiB consumida durante la derivación.
        p (int): Paralelismo configurado para Argon2id.
        outlen (int): Longitud en bytes de la clave resultante.

    Returns:
        bytes: KEK derivada.

    """

    return hash_secret_raw(
        secret,
        salt,
        time_cost=t,
        memory_cost=m,
        parallelism=p,
        hash_len=outlen,
        type=Type.ID,
    )
