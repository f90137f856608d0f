# --------------------------------------------------------------
# File: test_crypto_mac.py
# Description: Pruebas del cálculo y la verificación HMAC-SHA256.
# --------------------------------------------------------------

import pytest

from secseal.crypto_mac import MAC_LENGTH, compute_mac, verify_mac

# RFC 4231, caso de prueba 2.
RFC_KEY = b"Jefe"
RFC_DATA = b"what do ya want for nothing?"
RFC_MAC = bytes.fromhex("5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843")


def test_compute_mac_matches_rfc4231():
    """Comprueba el HMAC-SHA256 contra el vector publicado en RFC 4231.

    Returns:
        None: Las aserciones comparan la etiqueta calculada.
    """
    tag = compute_mac(RFC_DATA, RFC_KEY)
    assert len(tag) == MAC_LENGTH
    assert tag == RFC_MAC


def test_compute_mac_is_deterministic():
    key = b"k" * 32
    assert compute_mac(b"payload", key) == compute_mac(bytearray(b"payload"), bytearray(key))


def test_verify_mac_accepts_valid_tag():
    assert verify_mac(RFC_DATA, RFC_KEY, RFC_MAC) is True


@pytest.mark.parametrize("position", [0, 15, 31])
def test_verify_mac_rejects_flipped_bit(position):
    """Un solo bit alterado en la etiqueta invalida la verificación.

    Args:
        position (int): Byte de la etiqueta que se altera.

    Returns:
        None: Se espera ``False``.
    """
    tampered = bytearray(RFC_MAC)
    tampered[position] ^= 0x01
    assert verify_mac(RFC_DATA, RFC_KEY, bytes(tampered)) is False


@pytest.mark.parametrize("expected", [None, b"", RFC_MAC[:31], RFC_MAC + b"\x00"])
def test_verify_mac_rejects_wrong_length(expected):
    """Las etiquetas de longitud distinta a 32 bytes se rechazan sin comparar."""
    assert verify_mac(RFC_DATA, RFC_KEY, expected) is False


def test_verify_mac_rejects_other_data():
    assert verify_mac(RFC_DATA + b"!", RFC_KEY, RFC_MAC) is False
