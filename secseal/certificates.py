# --------------------------------------------------------------
# File: certificates.py
# Description: Acceso a certificados X.509 por huella para el motor híbrido.
# --------------------------------------------------------------
"""Capacidad ``CertificateSource`` consumida por el motor SCSPK1.

El motor solo necesita localizar un certificado por huella y obtener sus
claves RSA; la enumeración de almacenes concretos vive en ``secseal_api.pki``.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, Optional, Protocol, runtime_checkable

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa

from secseal.errors import FormatError, KeySourceFailure

__all__ = [
    "CertificateEntry",
    "CertificateSource",
    "ChainedCertificateSource",
    "InMemoryCertificateStore",
    "normalize_thumbprint",
    "thumbprint_of",
]

_THUMBPRINT_PATTERN = re.compile(r"^[0-9A-F]{40}$")


def normalize_thumbprint(value: str) -> str:
    """Normaliza una huella a hexadecimal mayúsculas sin separadores.

    Args:
        value (str): Huella con espacios, dos puntos o minúsculas.

    Returns:
        str: Huella SHA-1 de 40 caracteres.

    Raises:
        FormatError: Si el resultado no es una huella SHA-1 válida.

    """

    if not value or not value.strip():
        raise FormatError("La huella del certificado no puede estar vacía.")
    cleaned = re.sub(r"[\s:\-]", "", value).upper()
    if not _THUMBPRINT_PATTERN.match(cleaned):
        raise FormatError(f"Huella de certificado inválida: '{value}'.")
    return cleaned


def thumbprint_of(certificate: x509.Certificate) -> str:
    """Calcula la huella SHA-1 del certificado (DER) en hexadecimal mayúsculas."""

    return certificate.fingerprint(hashes.SHA1()).hex().upper()


class CertificateEntry:
    """Certificado con su clave privada opcional.

    Args:
        certificate (x509.Certificate): Certificado X.509.
        private_key (Optional[rsa.RSAPrivateKey]): Clave privada asociada, si se dispone de ella.
        location (str): Almacén de procedencia, útil para diagnósticos.

    """

    def __init__(
        self,
        certificate: x509.Certificate,
        private_key: Optional[rsa.RSAPrivateKey] = None,
        location: str = "memory",
    ) -> None:
        self.certificate = certificate
        self._private_key = private_key
        self.location = location
        self.thumbprint = thumbprint_of(certificate)

    def __repr__(self) -> str:
        return f"CertificateEntry(thumbprint={self.thumbprint}, location={self.location})"

    @property
    def has_public_key(self) -> bool:
        return isinstance(self.certificate.public_key(), rsa.RSAPublicKey)

    @property
    def has_private_key(self) -> bool:
        return self._private_key is not None

    def rsa_public(self) -> rsa.RSAPublicKey:
        """Devuelve la clave pública RSA del certificado.

        Raises:
            KeySourceFailure: Si la clave pública no es RSA.

        """

        public_key = self.certificate.public_key()
        if not isinstance(public_key, rsa.RSAPublicKey):
            raise KeySourceFailure(
                f"El certificado '{self.thumbprint}' no tiene una clave pública RSA.",
                source=self.location,
            )
        return public_key

    def rsa_private(self) -> rsa.RSAPrivateKey:
        """Devuelve la clave privada RSA.

        Raises:
            KeySourceFailure: Si no hay clave privada accesible o no es RSA.

        """

        if self._private_key is None:
            raise KeySourceFailure(
                f"Certificado '{self.thumbprint}' encontrado, pero sin clave privada accesible.",
                source=self.location,
            )
        if not isinstance(self._private_key, rsa.RSAPrivateKey):
            raise KeySourceFailure(
                f"La clave privada del certificado '{self.thumbprint}' no es RSA.",
                source=self.location,
            )
        return self._private_key


@runtime_checkable
class CertificateSource(Protocol):
    """Capacidad mínima de búsqueda de certificados."""

    def find_by_thumbprint(self, thumbprint: str) -> Optional[CertificateEntry]:
        ...


class InMemoryCertificateStore:
    """Almacén en memoria indexado por huella."""

    def __init__(self, entries: Iterable[CertificateEntry] = (), name: str = "memory") -> None:
        self.name = name
        self._entries: Dict[str, CertificateEntry] = {}
        for entry in entries:
            self.add(entry)

    def add(self, entry: CertificateEntry) -> None:
        self._entries[entry.thumbprint] = entry

    def find_by_thumbprint(self, thumbprint: str) -> Optional[CertificateEntry]:
        return self._entries.get(normalize_thumbprint(thumbprint))


class ChainedCertificateSource:
    """Consulta varios almacenes en orden y devuelve el primer resultado.

    El orden habitual es máquina y después usuario.
    """

    def __init__(self, *sources: CertificateSource) -> None:
        self.sources = tuple(sources)

    def find_by_thumbprint(self, thumbprint: str) -> Optional[CertificateEntry]:
        key = normalize_thumbprint(thumbprint)
        for source in self.sources:
            entry = source.find_by_thumbprint(key)
            if entry is not None:
                return entry
        return None
