# --------------------------------------------------------------
# File: pki.py
# Description: Almacenes de certificados en disco y emisión de certificados RSA.
# --------------------------------------------------------------
"""Adaptador PKI para el motor SCSPK1.

Cada almacén es un directorio con certificados PEM (``*.crt`` o ``*.pem``) y,
opcionalmente, la clave privada PKCS8 ``<HUELLA>.key`` junto a ellos. La
búsqueda por defecto consulta el almacén de máquina y después el de usuario.
"""

import glob
import os
from datetime import UTC, datetime, timedelta
from typing import Iterator, List, Optional, Tuple

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from secseal import config
from secseal.certificates import CertificateEntry, ChainedCertificateSource, normalize_thumbprint, thumbprint_of
from secseal.errors import KeySourceFailure
from secseal.logger import get_logger
from secseal.storage import write_bytes, write_text

CERT_PATTERNS = ("*.crt", "*.pem")
KEY_SUFFIX = ".key"

logger = get_logger(__name__)


class DirectoryCertificateStore:
    """Almacén de certificados respaldado por un directorio.

    Args:
        path (str): Directorio con los certificados.
        name (str): Nombre del almacén para diagnósticos (``machine``, ``user``...).

    """

    def __init__(self, path: str, name: str = "directory") -> None:
        self.path = path
        self.name = name

    def __repr__(self) -> str:
        return f"DirectoryCertificateStore(name={self.name}, path={self.path})"

    def _certificate_files(self) -> List[str]:
        if not os.path.isdir(self.path):
            return []
        files: List[str] = []
        for pattern in CERT_PATTERNS:
            files.extend(glob.glob(os.path.join(self.path, pattern)))
        return sorted(files)

    def _load_private_key(self, thumbprint: str) -> Optional[rsa.RSAPrivateKey]:
        key_path = os.path.join(self.path, thumbprint + KEY_SUFFIX)
        if not os.path.exists(key_path):
            return None
        with open(key_path, "rb") as f:
            data = f.read()
        try:
            return serialization.load_pem_private_key(data, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm):
            raise KeySourceFailure(
                f"No se pudo cargar la clave privada {os.path.basename(key_path)} (dañada o protegida con contraseña).",
                source=self.name,
            ) from None

    def certificates(self) -> Iterator[x509.Certificate]:
        """Recorre los certificados legibles del directorio.

        Los ficheros que no contienen un certificado PEM se omiten con un aviso.
        """

        for cert_path in self._certificate_files():
            with open(cert_path, "rb") as f:
                data = f.read()
            try:
                yield x509.load_pem_x509_certificate(data)
            except ValueError:
                logger.warning("pki: se omite %s (no es un certificado PEM)", cert_path)

    def find_by_thumbprint(self, thumbprint: str) -> Optional[CertificateEntry]:
        """Busca un certificado por huella SHA-1.

        Returns:
            Optional[CertificateEntry]: Certificado con su clave privada si existe
            ``<HUELLA>.key``; ``None`` si no hay coincidencia.

        """

        wanted = normalize_thumbprint(thumbprint)
        for certificate in self.certificates():
            if thumbprint_of(certificate) == wanted:
                private_key = self._load_private_key(wanted)
                return CertificateEntry(certificate, private_key, location=self.name)
        return None


def default_certificate_source() -> ChainedCertificateSource:
    """Cadena de búsqueda máquina → usuario según la configuración."""

    return ChainedCertificateSource(
        DirectoryCertificateStore(config.MACHINE_STORE, name="machine"),
        DirectoryCertificateStore(config.USER_STORE, name="user"),
    )


def issue_self_signed_rsa_cert(
    common_name: str, key_size: int = 2048, days_valid: int = 365
) -> Tuple[rsa.RSAPrivateKey, x509.Certificate]:
    """
    Genera un par RSA y un certificado autofirmado apto para cifrado de claves.
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)

    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(datetime.now(UTC) - timedelta(minutes=1))
        .not_valid_after(datetime.now(UTC) + timedelta(days=days_valid))
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=False,
                content_commitment=False,
                key_encipherment=True,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=False,
                crl_sign=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
    )
    certificate = builder.sign(private_key=private_key, algorithm=hashes.SHA256())
    return private_key, certificate


def save_certificate(
    store_dir: str,
    certificate: x509.Certificate,
    private_key: Optional[rsa.RSAPrivateKey] = None,
) -> str:
    """Guarda el certificado (y su clave privada, si se indica) en un almacén.

    Returns:
        str: Ruta del certificado escrito (``<HUELLA>.crt``).

    """

    thumbprint = thumbprint_of(certificate)
    cert_path = os.path.join(store_dir, thumbprint + ".crt")
    write_text(cert_path, certificate.public_bytes(serialization.Encoding.PEM).decode("ascii"))

    if private_key is not None:
        # La clave privada se guarda con permisos 0600.
        write_bytes(
            os.path.join(store_dir, thumbprint + KEY_SUFFIX),
            private_key.private_bytes(
                serialization.Encoding.PEM,
                serialization.PrivateFormat.PKCS8,
                serialization.NoEncryption(),
            ),
        )
    logger.info("pki: certificado %s guardado en %s", thumbprint, store_dir)
    return cert_path


def load_certificate(path: str) -> x509.Certificate:
    """
    Carga un certificado X.509 PEM desde disco.
    """
    with open(path, "rb") as f:
        return x509.load_pem_x509_certificate(f.read())
