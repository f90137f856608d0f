# --------------------------------------------------------------
# File: test_crypto_sign.py
# Description: Pruebas de las firmas separadas SCSIG1.
# --------------------------------------------------------------

import pytest

from secseal.crypto_sign import SignEngine, sign, verify
from secseal.errors import KeySourceFailure, PolicyViolation
from secseal.formats import build_scsig1, parse_scsig1

PASSPHRASE = b"signing-passphrase"


def _expect_invalid(check_callable):
    """Valida que una verificación falle devolviendo False sin lanzar excepción.

    Args:
        check_callable (Callable[[], bool]): Función que ejecuta la verificación.

    Returns:
        None: El helper asume control de aserciones internas.
    """
    assert check_callable() is False


def test_sign_and_verify_ok():
    """Comprueba que una firma recién generada se verifique.

    Returns:
        None: Las aserciones validan el formato y la verificación.
    """
    data = b"release-1.2.3.tar.gz contents"
    signature = sign(data, PASSPHRASE, 10000)
    assert signature.startswith("SCSIG1$kdf=PBKDF2-SHA1$iter=10000$salt=")
    parsed = parse_scsig1(signature)
    assert len(parsed.salt) == 16
    assert len(parsed.signature) == 32
    assert verify(data, signature, PASSPHRASE) is True


def test_verify_fails_with_modified_data():
    """Verifica que alterar los datos invalide la firma."""
    signature = sign(b"artifact", PASSPHRASE, 10000)
    _expect_invalid(lambda: verify(b"artifacT", signature, PASSPHRASE))
    _expect_invalid(lambda: verify(b"", signature, PASSPHRASE))


def test_verify_fails_with_wrong_passphrase():
    signature = sign(b"artifact", PASSPHRASE, 10000)
    _expect_invalid(lambda: verify(b"artifact", signature, b"other-passphrase"))


def test_verify_fails_with_tampered_signature():
    """Un bit alterado en ``sig`` invalida la verificación.

    Returns:
        None: Se espera ``False``.
    """
    parsed = parse_scsig1(sign(b"artifact", PASSPHRASE, 10000))
    altered = bytearray(parsed.signature)
    altered[-1] ^= 0x01
    tampered = build_scsig1(parsed.model_copy(update={"signature": bytes(altered)}))
    _expect_invalid(lambda: verify(b"artifact", tampered, PASSPHRASE))


@pytest.mark.parametrize(
    "signature",
    [
        "",
        "not a signature",
        "SCS1$kdf=PBKDF2-SHA1$iter=10000",
        "SCSIG1$kdf=PBKDF2-SHA1$iter=10000$salt=AAAA$sig=AAAA",  # sal y firma cortas
        "SCSIG1$kdf=PBKDF2-SHA1$iter=9999$salt=AAAAAAAAAAAAAAAAAAAAAA==$sig=@@",
    ],
)
def test_verify_returns_false_for_malformed_signature(signature):
    """Las firmas mal formadas se tratan como verificación fallida.

    Args:
        signature (str): Cadena no válida.

    Returns:
        None: Se espera ``False`` en lugar de una excepción.
    """
    _expect_invalid(lambda: verify(b"artifact", signature, PASSPHRASE))


def test_sign_rejects_low_iterations():
    with pytest.raises(PolicyViolation):
        sign(b"artifact", PASSPHRASE, 9999)


def test_empty_passphrase_is_key_source_failure():
    with pytest.raises(KeySourceFailure):
        sign(b"artifact", b"", 10000)
    with pytest.raises(KeySourceFailure):
        verify(b"artifact", sign(b"artifact", PASSPHRASE, 10000), "")


def test_signature_is_deterministic_with_fixed_salt():
    """Con la misma sal y passphrase, la firma depende solo de los datos."""
    engine = SignEngine(rng=lambda n: b"\x09" * n, default_iterations=10000)
    assert engine.sign(b"a", PASSPHRASE) == engine.sign(b"a", PASSPHRASE)
    assert engine.sign(b"a", PASSPHRASE) != engine.sign(b"b", PASSPHRASE)
