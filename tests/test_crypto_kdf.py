# --------------------------------------------------------------
# File: test_crypto_kdf.py
# Description: Pruebas de la derivación PBKDF2 con separación de dominio y de la KEK Argon2id.
# --------------------------------------------------------------

import hashlib

import pytest

from secseal.crypto_kdf import DOMAIN_SEPARATOR, derive_kek, derive_key, to_passphrase_bytes
from secseal.errors import PolicyViolation

SALT = bytes(range(16))


def test_derive_key_applies_domain_separator():
    """Comprueba que la sal efectiva sea ``salt || |scs1|``.

    Returns:
        None: Las aserciones comparan con PBKDF2 de la biblioteca estándar.
    """
    with derive_key(b"p@ssw0rd", SALT, 10000, 64) as derived:
        expected = hashlib.pbkdf2_hmac("sha1", b"p@ssw0rd", SALT + DOMAIN_SEPARATOR, 10000, 64)
        without_separator = hashlib.pbkdf2_hmac("sha1", b"p@ssw0rd", SALT, 10000, 64)
        assert derived.bytes() == expected
        assert derived.bytes() != without_separator


def test_derive_key_is_deterministic_and_str_equals_utf8():
    """Verifica el determinismo y que ``str`` se codifique en UTF-8."""
    from_text = derive_key("contraseña", SALT, 10000, 32)
    from_bytes = derive_key("contraseña".encode("utf-8"), SALT, 10000, 32)
    assert len(from_text) == 32
    assert from_text.bytes() == from_bytes.bytes()


def test_derive_key_changes_with_salt():
    """Sales distintas producen claves distintas."""
    with derive_key(b"pw", SALT, 10000, 32) as a, derive_key(b"pw", bytes(16), 10000, 32) as b:
        assert a.bytes() != b.bytes()


@pytest.mark.parametrize("iterations", [0, 1, 9999])
def test_derive_key_rejects_low_iterations(iterations):
    """Garantiza el suelo de 10000 iteraciones.

    Args:
        iterations (int): Número de iteraciones por debajo del mínimo.

    Returns:
        None: Se espera PolicyViolation.
    """
    with pytest.raises(PolicyViolation):
        derive_key(b"pw", SALT, iterations, 32)


def test_derive_key_rejects_empty_length():
    with pytest.raises(PolicyViolation):
        derive_key(b"pw", SALT, 10000, 0)


def test_to_passphrase_bytes_returns_mutable_copy():
    """La passphrase normalizada es un ``bytearray`` que se puede borrar."""
    original = b"secret"
    copy = to_passphrase_bytes(original)
    assert isinstance(copy, bytearray)
    copy[:] = bytes(len(copy))
    assert original == b"secret"


def test_derive_kek_argon2id():
    """Comprueba longitud y determinismo de la KEK Argon2id.

    Returns:
        None: Las aserciones validan el tamaño y la reproducibilidad.
    """
    salt = b"\x01" * 16
    kek1 = derive_kek(b"master", salt, t=1, m=8 * 1024)
    kek2 = derive_kek(b"master", salt, t=1, m=8 * 1024)
    kek3 = derive_kek(b"other", salt, t=1, m=8 * 1024)
    assert len(kek1) == 32
    assert kek1 == kek2
    assert kek1 != kek3
