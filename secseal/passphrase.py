# --------------------------------------------------------------
# File: passphrase.py
# Description: Orígenes de passphrase consumidos por los motores y keyfiles protegidos.
# --------------------------------------------------------------
"""Implementaciones de la capacidad ``PassphraseSource``.

Los motores solo necesitan ``get_passphrase() -> bytes``. Aquí viven los
orígenes habituales: un secreto en memoria, una variable de entorno y un
keyfile cuya passphrase está cifrada con una KEK Argon2id derivada del
secreto maestro del usuario (``SECSEAL_KEYFILE_SECRET``).
"""

from __future__ import annotations

import base64
import binascii
import json
import os
from datetime import UTC, datetime
from typing import Optional, Protocol, Union, runtime_checkable

from cryptography.exceptions import InvalidTag

from secseal import config
from secseal.crypto_kdf import derive_kek, to_passphrase_bytes
from secseal.crypto_sym import aes_gcm_decrypt_with_key, aes_gcm_encrypt_with_key
from secseal.errors import KeySourceFailure
from secseal.logger import get_logger
from secseal.secure_memory import wipe
from secseal.storage import load_json, save_json

__all__ = [
    "PassphraseSource",
    "StaticPassphraseSource",
    "EnvPassphraseSource",
    "KeyfilePassphraseSource",
    "create_keyfile",
    "resolve_passphrase_source",
    "KDF_PARAMS",
]

# Configuración Argon2id de la KEK que protege los keyfiles.
KDF_PARAMS = {"t": 3, "m": 64 * 1024, "p": 1, "outlen": 32, "alg": "argon2id"}
KEYFILE_VERSION = 1

logger = get_logger(__name__)


def _b64u(data: bytes) -> str:
    """Codifica datos binarios en Base64 URL-safe sin relleno."""

    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64u(value: str) -> bytes:
    """Decodifica Base64 URL-safe gestionando el relleno."""

    pad = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + pad)


@runtime_checkable
class PassphraseSource(Protocol):
    """Capacidad mínima: devolver los bytes de la passphrase."""

    def get_passphrase(self) -> bytes:
        ...


class StaticPassphraseSource:
    """Passphrase mantenida en memoria (texto o bytes).

    Args:
        secret (Union[str, bytes, bytearray]): Passphrase; ``str`` se codifica en UTF-8.

    """

    def __init__(self, secret: Union[str, bytes, bytearray]) -> None:
        self._secret = to_passphrase_bytes(secret)

    def get_passphrase(self) -> bytes:
        if not self._secret:
            raise KeySourceFailure("La passphrase proporcionada está vacía.", source="memory")
        return bytes(self._secret)


class EnvPassphraseSource:
    """Passphrase leída de una variable de entorno en el momento de uso."""

    def __init__(self, name: str) -> None:
        if not name or not name.strip():
            raise KeySourceFailure("El nombre de la variable de entorno no puede estar vacío.", source="env")
        self.name = name

    def get_passphrase(self) -> bytes:
        value = os.environ.get(self.name)
        if not value:
            raise KeySourceFailure(
                f"La variable de entorno '{self.name}' no está definida o está vacía.",
                source=f"env:{self.name}",
            )
        return value.encode("utf-8")


class KeyfilePassphraseSource:
    """Passphrase almacenada en un keyfile JSON cifrado con AES-GCM.

    Args:
        path (str): Ruta del keyfile.
        master_secret (Optional[bytes]): Secreto maestro; por defecto ``config.KEYFILE_SECRET``.

    """

    def __init__(self, path: str, master_secret: Optional[bytes] = None) -> None:
        self.path = path
        self._master_secret = config.KEYFILE_SECRET if master_secret is None else master_secret

    def get_passphrase(self) -> bytes:
        source = f"keyfile:{self.path}"
        if not os.path.exists(self.path):
            raise KeySourceFailure(f"No se encontró el keyfile: {self.path}", source=source)

        try:
            doc = load_json(self.path)
            params = doc["kdf"]
            supported = doc["version"] == KEYFILE_VERSION and params["alg"] == KDF_PARAMS["alg"]
            cost = {"t": params["t"], "m": params["m"], "p": params["p"], "outlen": params["outlen"]}
            salt = _unb64u(doc["salt"])
            nonce = _unb64u(doc["nonce"])
            tag = _unb64u(doc["tag"])
            ciphertext = _unb64u(doc["ct"])
        except (OSError, json.JSONDecodeError, KeyError, TypeError, binascii.Error) as exc:
            raise KeySourceFailure(f"No se pudo leer el keyfile '{self.path}'.", source=source) from exc

        if not supported:
            raise KeySourceFailure(f"Versión de keyfile no soportada en '{self.path}'.", source=source)

        kek = bytearray(derive_kek(self._master_secret, salt, **cost))
        try:
            passphrase = aes_gcm_decrypt_with_key(bytes(kek), nonce, ciphertext, tag)
        except (InvalidTag, ValueError):
            raise KeySourceFailure(
                f"No se pudo descifrar el keyfile '{self.path}'. "
                "Puede haberlo creado otro usuario o estar dañado.",
                source=source,
            ) from None
        finally:
            wipe(kek)

        logger.debug("keyfile: passphrase recuperada de %s", self.path)
        return passphrase


def create_keyfile(
    path: str, passphrase: Union[str, bytes, bytearray], master_secret: Optional[bytes] = None
) -> None:
    """Crea un keyfile que protege ``passphrase`` con una KEK Argon2id.

    Args:
        path (str): Ruta de destino (se escribe de forma atómica con permisos 0600).
        passphrase (Union[str, bytes, bytearray]): Passphrase a proteger.
        master_secret (Optional[bytes]): Secreto maestro; por defecto ``config.KEYFILE_SECRET``.

    """

    secret = to_passphrase_bytes(passphrase)
    if not secret:
        raise KeySourceFailure("No se puede guardar una passphrase vacía.", source=f"keyfile:{path}")

    master = config.KEYFILE_SECRET if master_secret is None else master_secret
    salt = os.urandom(16)
    kek = bytearray(
        derive_kek(
            master,
            salt,
            t=KDF_PARAMS["t"],
            m=KDF_PARAMS["m"],
            p=KDF_PARAMS["p"],
            outlen=KDF_PARAMS["outlen"],
        )
    )
    try:
        ciphertext, nonce, tag = aes_gcm_encrypt_with_key(bytes(kek), bytes(secret))
    finally:
        wipe(kek)
        wipe(secret)

    save_json(
        {
            "version": KEYFILE_VERSION,
            "kdf": KDF_PARAMS,
            "salt": _b64u(salt),
            "nonce": _b64u(nonce),
            "tag": _b64u(tag),
            "ct": _b64u(ciphertext),
            "created_at": datetime.now(UTC).isoformat(),
        },
        path,
    )
    logger.debug("keyfile: creado en %s", path)


def resolve_passphrase_source(
    *,
    passphrase: Optional[Union[str, bytes, bytearray]] = None,
    env: Optional[str] = None,
    keyfile: Optional[str] = None,
) -> PassphraseSource:
    """Construye el origen de passphrase a partir de exactamente una opción.

    Raises:
        KeySourceFailure: Si no se indica ningún origen o se indica más de uno.

    """

    chosen = [name for name, value in (("passphrase", passphrase), ("env", env), ("keyfile", keyfile)) if value]
    if not chosen:
        raise KeySourceFailure("Debe indicarse un origen de passphrase.", source="passphrase")
    if len(chosen) > 1:
        raise KeySourceFailure(
            f"Solo se puede indicar un origen de passphrase (recibidos: {', '.join(chosen)}).",
            source="passphrase",
        )

    if passphrase:
        return StaticPassphraseSource(passphrase)
    if env:
        return EnvPassphraseSource(env)
    return KeyfilePassphraseSource(keyfile)
