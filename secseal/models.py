# --------------------------------------------------------------
# File: models.py
# Description: Objetos de valor inmutables para sobres, firmas y metadatos.
# --------------------------------------------------------------
"""Modelos Pydantic que encapsulan los formatos SCS1, SCSPK1 y SCSIG1.

Los modelos no validan invariantes criptográficas: de eso se encarga
``secseal.formats`` al construir o interpretar las cadenas.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Scs1Envelope(BaseModel):
    """Sobre simétrico basado en passphrase.

    Attributes:
        iterations (int): Iteraciones PBKDF2.
        salt (bytes): Sal de la derivación (sin separador de dominio).
        iv (bytes): Vector de inicialización AES-CBC.
        ciphertext (bytes): Datos cifrados con relleno PKCS7.
        mac (bytes): HMAC-SHA256 sobre ``iv || ciphertext``.

    """

    model_config = ConfigDict(frozen=True)

    iterations: int
    salt: bytes
    iv: bytes
    ciphertext: bytes
    mac: bytes


class Scspk1Envelope(BaseModel):
    """Sobre híbrido protegido con un certificado RSA.

    Attributes:
        key_id (str): Huella SHA-1 del certificado en hexadecimal mayúsculas.
        encrypted_session_key (bytes): Clave de sesión cifrada con RSA-OAEP-SHA256.
        iv (bytes): Vector de inicialización AES-CBC.
        ciphertext (bytes): Datos cifrados con la mitad de cifrado de la sesión.
        mac (bytes): HMAC-SHA256 sobre la cabecera textual y el ciphertext.

    """

    model_config = ConfigDict(frozen=True)

    key_id: str
    encrypted_session_key: bytes
    iv: bytes
    ciphertext: bytes
    mac: bytes


class Scsig1Signature(BaseModel):
    """Firma separada de solo integridad."""

    model_config = ConfigDict(frozen=True)

    iterations: int
    salt: bytes
    signature: bytes


class EnvelopeMetadata(BaseModel):
    """Resumen auditable de un sobre obtenido sin material de clave."""

    model_config = ConfigDict(frozen=True)

    format: str
    kdf: Optional[str] = None
    iterations: Optional[int] = None
    key_id: Optional[str] = None
    cipher: Optional[str] = None
    salt_length: int = 0
    iv_length: int = 0
    mac_length: int = 0
    ciphertext_length: int = 0
    encrypted_key_length: int = 0
    estimated_plaintext_min: Optional[int] = None
    estimated_plaintext_max: Optional[int] = None
    envelope_size: int = 0
    recommendations: List[str] = []
