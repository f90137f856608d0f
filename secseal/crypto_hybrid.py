# --------------------------------------------------------------
# File: crypto_hybrid.py
# Description: Motor SCSPK1 de cifrado híbrido RSA-OAEP + AES-256-CBC + HMAC-SHA256.
# --------------------------------------------------------------
"""Protección de secretos para el titular de un certificado RSA.

Se genera una clave de sesión aleatoria de 64 bytes (``enc_key = [0:32]``,
``mac_key = [32:64]``) que se envuelve con RSA-OAEP-SHA256. El MAC cubre la
cabecera textual completa (formato, ``kid``, ``ek``, ``iv`` y ``ct``), de modo
que cambiar el identificador de clave invalida el sobre.
"""

from typing import Callable, Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from secseal.certificates import CertificateEntry, CertificateSource
from secseal.crypto_mac import compute_mac, verify_mac
from secseal.crypto_sym import IV_LENGTH, KEY_LENGTH, aes_cbc_decrypt, aes_cbc_encrypt, random_bytes
from secseal.errors import CryptoBackendFailure, IntegrityFailure, KeySourceFailure
from secseal.formats import build_scspk1, parse_scspk1, scspk1_mac_input
from secseal.logger import get_logger
from secseal.models import Scspk1Envelope
from secseal.secure_memory import SecureBuffer

__all__ = ["HybridEngine", "SESSION_KEY_LENGTH", "oaep_sha256"]

SESSION_KEY_LENGTH = 64

logger = get_logger(__name__)


def oaep_sha256() -> padding.OAEP:
    """Relleno RSA-OAEP con SHA-256 y MGF1-SHA256 (PKCS#1 v1.5 no se admite)."""

    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


class HybridEngine:
    """Motor SCSPK1.

    Args:
        certificates (Optional[CertificateSource]): Fuente usada por ``unprotect``
            para localizar el certificado y su clave privada.
        rng (Callable[[int], bytes]): Fuente CSPRNG.

    """

    def __init__(
        self,
        certificates: Optional[CertificateSource] = None,
        rng: Callable[[int], bytes] = random_bytes,
    ) -> None:
        self._certificates = certificates
        self._rng = rng

    def protect(self, plaintext: bytes, certificate: Union[CertificateEntry, x509.Certificate]) -> str:
        """Cifra ``plaintext`` para el titular de ``certificate``.

        Args:
            plaintext (bytes): Datos en claro.
            certificate (Union[CertificateEntry, x509.Certificate]): Certificado destinatario.

        Returns:
            str: Cadena ``SCSPK1$kid=...``.

        Raises:
            KeySourceFailure: Si el certificado no tiene clave pública RSA.

        """

        if isinstance(certificate, x509.Certificate):
            certificate = CertificateEntry(certificate)
        public_key = certificate.rsa_public()
        key_id = certificate.thumbprint

        with SecureBuffer(self._rng(SESSION_KEY_LENGTH)) as session:
            enc_key, mac_key = session.split(KEY_LENGTH)
            with enc_key, mac_key:
                try:
                    encrypted_session_key = public_key.encrypt(session.bytes(), oaep_sha256())
                except ValueError as exc:
                    raise CryptoBackendFailure("No se pudo envolver la clave de sesión con RSA-OAEP.") from exc

                iv = self._rng(IV_LENGTH)
                ciphertext = aes_cbc_encrypt(plaintext, enc_key.view(), iv)
                mac = compute_mac(
                    scspk1_mac_input(key_id, encrypted_session_key, iv, ciphertext), mac_key.view()
                )

        logger.debug("protect: kid=%s plaintext_len=%s", key_id, len(plaintext))
        return build_scspk1(
            Scspk1Envelope(
                key_id=key_id,
                encrypted_session_key=encrypted_session_key,
                iv=iv,
                ciphertext=ciphertext,
                mac=mac,
            )
        )

    def unprotect(self, envelope: str) -> bytes:
        """Descifra un sobre SCSPK1 con la clave privada del certificado indicado.

        Args:
            envelope (str): Cadena SCSPK1.

        Returns:
            bytes: Texto en claro original.

        Raises:
            FormatError: Si la cadena no es un SCSPK1 válido.
            KeySourceFailure: Si el certificado no existe o carece de clave privada.
            IntegrityFailure: Si la clave de sesión no se puede desenvolver o el MAC no coincide.

        """

        parsed = parse_scspk1(envelope)
        if self._certificates is None:
            raise KeySourceFailure("No hay ninguna fuente de certificados configurada.", source="certificates")

        entry = self._certificates.find_by_thumbprint(parsed.key_id)
        if entry is None:
            raise KeySourceFailure(
                f"No se encontró el certificado con huella '{parsed.key_id}' en los almacenes de máquina ni de usuario.",
                source="certificates",
            )
        if not entry.has_private_key:
            raise KeySourceFailure(
                f"Certificado '{parsed.key_id}' encontrado, pero sin clave privada accesible.",
                source=entry.location,
            )
        private_key = entry.rsa_private()
        logger.debug("unprotect: kid=%s location=%s", parsed.key_id, entry.location)

        try:
            unwrapped = private_key.decrypt(parsed.encrypted_session_key, oaep_sha256())
        except Exception:
            # Cualquier fallo RSA se reporta igual que un MAC incorrecto.
            logger.info("unprotect: no se pudo desenvolver la clave de sesión")
            raise IntegrityFailure() from None

        with SecureBuffer(unwrapped) as session:
            if len(session) != SESSION_KEY_LENGTH:
                raise IntegrityFailure()
            enc_key, mac_key = session.split(KEY_LENGTH)
            with enc_key, mac_key:
                mac_input = scspk1_mac_input(
                    parsed.key_id, parsed.encrypted_session_key, parsed.iv, parsed.ciphertext
                )
                if not verify_mac(mac_input, mac_key.view(), parsed.mac):
                    logger.info("unprotect: verificación de MAC fallida")
                    raise IntegrityFailure()
                try:
                    return aes_cbc_decrypt(parsed.ciphertext, enc_key.view(), parsed.iv)
                except CryptoBackendFailure:
                    raise IntegrityFailure() from None
