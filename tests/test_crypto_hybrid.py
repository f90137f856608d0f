# --------------------------------------------------------------
# File: test_crypto_hybrid.py
# Description: Pruebas del cifrado híbrido SCSPK1 con certificados RSA.
# --------------------------------------------------------------

import os
from datetime import UTC, datetime, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.x509.oid import NameOID

from secseal.certificates import CertificateEntry, ChainedCertificateSource, InMemoryCertificateStore
from secseal.crypto_hybrid import HybridEngine, oaep_sha256
from secseal.errors import INTEGRITY_MESSAGE, IntegrityFailure, KeySourceFailure
from secseal.formats import build_scspk1, parse_scspk1


def _store(*entries: CertificateEntry) -> InMemoryCertificateStore:
    return InMemoryCertificateStore(entries)


def test_protect_unprotect_roundtrip(certificate_entry):
    """Comprueba el round trip SCSPK1 y que ``kid`` sea la huella del certificado.

    Args:
        certificate_entry (CertificateEntry): Certificado con clave privada.

    Returns:
        None: Las aserciones validan el claro y la cabecera.
    """
    envelope = HybridEngine().protect(b"db-password", certificate_entry)
    assert envelope.startswith(f"SCSPK1$kid={certificate_entry.thumbprint}$ek=")

    parsed = parse_scspk1(envelope)
    assert len(parsed.encrypted_session_key) == 256  # RSA-2048

    engine = HybridEngine(_store(certificate_entry))
    assert engine.unprotect(envelope) == b"db-password"


@pytest.mark.parametrize("size", [0, 1, 16, 4096])
def test_roundtrip_sizes(certificate_entry, size):
    plaintext = os.urandom(size)
    envelope = HybridEngine().protect(plaintext, certificate_entry)
    assert HybridEngine(_store(certificate_entry)).unprotect(envelope) == plaintext


def test_protect_accepts_plain_certificate(rsa_identity, certificate_entry):
    """Solo se necesita la clave pública para proteger."""
    _, certificate = rsa_identity
    envelope = HybridEngine().protect(b"secret", certificate)
    assert HybridEngine(_store(certificate_entry)).unprotect(envelope) == b"secret"


def test_unprotect_with_different_key_is_integrity_failure(certificate_entry, other_rsa_identity):
    """Sustituir ``kid`` por otro certificado disponible falla como integridad.

    Args:
        certificate_entry (CertificateEntry): Destinatario original.
        other_rsa_identity (tuple): Otro par RSA presente en el almacén.

    Returns:
        None: Se espera IntegrityFailure con el mensaje genérico.
    """
    other_key, other_cert = other_rsa_identity
    other = CertificateEntry(other_cert, other_key)
    envelope = HybridEngine().protect(b"secret", certificate_entry)
    swapped = envelope.replace(
        f"kid={certificate_entry.thumbprint}", f"kid={other.thumbprint}", 1
    )
    with pytest.raises(IntegrityFailure) as exc_info:
        HybridEngine(_store(certificate_entry, other)).unprotect(swapped)
    assert str(exc_info.value) == INTEGRITY_MESSAGE


@pytest.mark.parametrize("field", ["ciphertext", "iv", "mac"])
def test_unprotect_detects_tampering(certificate_entry, field):
    parsed = parse_scspk1(HybridEngine().protect(b"secret", certificate_entry))
    altered = bytearray(getattr(parsed, field))
    altered[0] ^= 0x80
    tampered = build_scspk1(parsed.model_copy(update={field: bytes(altered)}))
    with pytest.raises(IntegrityFailure):
        HybridEngine(_store(certificate_entry)).unprotect(tampered)


def test_unprotect_rejects_short_session_key(rsa_identity, certificate_entry):
    """Una clave de sesión que no mide 64 bytes se rechaza como integridad.

    Returns:
        None: Se espera IntegrityFailure.
    """
    _, certificate = rsa_identity
    parsed = parse_scspk1(HybridEngine().protect(b"secret", certificate_entry))
    short_key = certificate.public_key().encrypt(os.urandom(32), oaep_sha256())
    forged = build_scspk1(parsed.model_copy(update={"encrypted_session_key": short_key}))
    with pytest.raises(IntegrityFailure):
        HybridEngine(_store(certificate_entry)).unprotect(forged)


def test_unprotect_without_source(certificate_entry):
    envelope = HybridEngine().protect(b"secret", certificate_entry)
    with pytest.raises(KeySourceFailure):
        HybridEngine().unprotect(envelope)


def test_unprotect_certificate_not_found(certificate_entry):
    """Un ``kid`` ausente de todos los almacenes es un fallo de origen de clave."""
    envelope = HybridEngine().protect(b"secret", certificate_entry)
    with pytest.raises(KeySourceFailure) as exc_info:
        HybridEngine(_store()).unprotect(envelope)
    assert certificate_entry.thumbprint in str(exc_info.value)


def test_unprotect_without_private_key(rsa_identity, certificate_entry):
    """El certificado existe pero sin clave privada accesible.

    Returns:
        None: Se espera KeySourceFailure.
    """
    _, certificate = rsa_identity
    public_only = CertificateEntry(certificate, location="user")
    envelope = HybridEngine().protect(b"secret", certificate_entry)
    with pytest.raises(KeySourceFailure) as exc_info:
        HybridEngine(_store(public_only)).unprotect(envelope)
    assert exc_info.value.source == "user"


def test_chained_source_checks_machine_then_user(certificate_entry):
    """La búsqueda encadenada continúa en el almacén de usuario."""
    machine = InMemoryCertificateStore(name="machine")
    user = InMemoryCertificateStore([certificate_entry], name="user")
    envelope = HybridEngine().protect(b"secret", certificate_entry)
    engine = HybridEngine(ChainedCertificateSource(machine, user))
    assert engine.unprotect(envelope) == b"secret"


def test_protect_rejects_non_rsa_certificate():
    """Un certificado Ed25519 no sirve para envolver la clave de sesión.

    Returns:
        None: Se espera KeySourceFailure.
    """
    key = ed25519.Ed25519PrivateKey.generate()
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "ed25519")])
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(datetime.now(UTC) - timedelta(minutes=1))
        .not_valid_after(datetime.now(UTC) + timedelta(days=1))
        .sign(private_key=key, algorithm=None)
    )
    with pytest.raises(KeySourceFailure):
        HybridEngine().protect(b"secret", certificate)
