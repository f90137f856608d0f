# --------------------------------------------------------------
# File: crypto_sign.py
# Description: Firmas separadas SCSIG1 basadas en PBKDF2 y HMAC-SHA256.
# --------------------------------------------------------------
"""Firmas de solo integridad: no cifran, solo autentican datos externos."""

from typing import Callable, Optional, Union

from secseal import config
from secseal.crypto_kdf import derive_key
from secseal.crypto_mac import compute_mac, verify_mac
from secseal.crypto_sym import random_bytes
from secseal.errors import FormatError, KeySourceFailure, PolicyViolation
from secseal.formats import build_scsig1, parse_scsig1
from secseal.logger import get_logger
from secseal.models import Scsig1Signature

__all__ = ["SignEngine", "sign", "verify"]

DERIVED_KEY_LENGTH = 32
SALT_LENGTH = 16

Passphrase = Union[bytes, bytearray, str]

logger = get_logger(__name__)


class SignEngine:
    """Motor SCSIG1.

    Args:
        rng (Callable[[int], bytes]): Fuente CSPRNG para la sal.
        default_iterations (Optional[int]): Iteraciones por defecto de ``sign``.

    """

    def __init__(
        self,
        rng: Callable[[int], bytes] = random_bytes,
        default_iterations: Optional[int] = None,
    ) -> None:
        self._rng = rng
        self._default_iterations = (
            config.DEFAULT_ITERATIONS if default_iterations is None else default_iterations
        )

    def sign(self, data: bytes, passphrase: Passphrase, iterations: Optional[int] = None) -> str:
        """Firma ``data`` y devuelve una cadena SCSIG1.

        Args:
            data (bytes): Datos a firmar.
            passphrase (Passphrase): Passphrase del firmante.
            iterations (Optional[int]): Iteraciones PBKDF2.

        Returns:
            str: Cadena ``SCSIG1$kdf=PBKDF2-SHA1$iter=...``.

        """

        if not passphrase:
            raise KeySourceFailure("La passphrase no puede estar vacía.", source="passphrase")
        iterations = self._default_iterations if iterations is None else iterations

        salt = self._rng(SALT_LENGTH)
        with derive_key(passphrase, salt, iterations, DERIVED_KEY_LENGTH) as key:
            signature = compute_mac(data, key.view())

        logger.debug("sign: iterations=%s data_len=%s", iterations, len(data))
        return build_scsig1(Scsig1Signature(iterations=iterations, salt=salt, signature=signature))

    def verify(self, data: bytes, signature: str, passphrase: Passphrase) -> bool:
        """Comprueba una firma SCSIG1 contra ``data``.

        Las firmas mal formadas o que incumplen los mínimos se tratan como
        verificación fallida, de modo que se puedan sondear blobs no confiables.

        Returns:
            bool: ``True`` solo si la firma es válida para ``data`` y la passphrase.

        """

        if not passphrase:
            raise KeySourceFailure("La passphrase no puede estar vacía.", source="passphrase")
        try:
            parsed = parse_scsig1(signature)
        except (FormatError, PolicyViolation) as exc:
            logger.info("verify: firma no válida (%s)", exc.kind.value)
            return False

        with derive_key(passphrase, parsed.salt, parsed.iterations, DERIVED_KEY_LENGTH) as key:
            return verify_mac(data, key.view(), parsed.signature)


def sign(data: bytes, passphrase: Passphrase, iterations: Optional[int] = None) -> str:
    """Atajo de :meth:`SignEngine.sign`."""

    return SignEngine().sign(data, passphrase, iterations)


def verify(data: bytes, signature: str, passphrase: Passphrase) -> bool:
    """Atajo de :meth:`SignEngine.verify`."""

    return SignEngine().verify(data, signature, passphrase)
