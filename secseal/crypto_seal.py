# --------------------------------------------------------------
# File: crypto_seal.py
# Description: Motor SCS1 de sellado y apertura con passphrase (cifrar y luego MAC).
# --------------------------------------------------------------
"""Sellado simétrico de secretos con PBKDF2, AES-256-CBC y HMAC-SHA256.

Flujo de ``seal``:

1. Sal e IV aleatorios de 16 bytes.
2. PBKDF2 → 64 bytes: ``enc_key = [0:32]``, ``mac_key = [32:64]``.
3. ``ct = AES-CBC(plaintext)``.
4. ``mac = HMAC(iv || ct)``.
5. Cadena SCS1.

``unseal`` verifica el MAC antes de descifrar y no distingue entre datos
manipulados y passphrase incorrecta.
"""

from typing import Callable, Optional, Union

from secseal import config
from secseal.crypto_kdf import derive_key
from secseal.crypto_mac import compute_mac, verify_mac
from secseal.crypto_sym import IV_LENGTH, KEY_LENGTH, aes_cbc_decrypt, aes_cbc_encrypt, random_bytes
from secseal.errors import CryptoBackendFailure, IntegrityFailure, KeySourceFailure
from secseal.formats import build_scs1, parse_scs1
from secseal.logger import get_logger
from secseal.models import Scs1Envelope
from secseal.secure_memory import wipe

__all__ = ["SealEngine", "seal", "unseal"]

DERIVED_KEY_LENGTH = 64
SALT_LENGTH = 16

Passphrase = Union[bytes, bytearray, str]

logger = get_logger(__name__)


def _require_passphrase(passphrase: Optional[Passphrase]) -> None:
    if passphrase is None or len(passphrase) == 0:
        raise KeySourceFailure("La passphrase no puede estar vacía.", source="passphrase")


class SealEngine:
    """Motor SCS1 sin estado mutable compartido.

    Args:
        rng (Callable[[int], bytes]): Fuente CSPRNG; por defecto ``os.urandom``.
        default_iterations (int): Iteraciones usadas cuando ``seal`` no las recibe.

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

    @property
    def default_iterations(self) -> int:
        return self._default_iterations

    def seal(self, plaintext: bytes, passphrase: Passphrase, iterations: Optional[int] = None) -> str:
        """Cifra ``plaintext`` y devuelve un sobre SCS1.

        Args:
            plaintext (bytes): Datos en claro (puede ser vacío).
            passphrase (Passphrase): Passphrase en bytes o texto.
            iterations (Optional[int]): Iteraciones PBKDF2 (mínimo 10000).

        Returns:
            str: Cadena ``SCS1$kdf=PBKDF2-SHA1$iter=...``.

        Raises:
            PolicyViolation: Si las iteraciones están por debajo del mínimo.
            KeySourceFailure: Si la passphrase está vacía.

        """

        _require_passphrase(passphrase)
        iterations = self._default_iterations if iterations is None else iterations

        salt = self._rng(SALT_LENGTH)
        iv = self._rng(IV_LENGTH)
        logger.debug("seal: iterations=%s plaintext_len=%s", iterations, len(plaintext))

        mac_input = bytearray()
        with derive_key(passphrase, salt, iterations, DERIVED_KEY_LENGTH) as derived:
            enc_key, mac_key = derived.split(KEY_LENGTH)
            with enc_key, mac_key:
                try:
                    ciphertext = aes_cbc_encrypt(plaintext, enc_key.view(), iv)
                    mac_input = bytearray(iv) + ciphertext
                    mac = compute_mac(mac_input, mac_key.view())
                finally:
                    wipe(mac_input)

        return build_scs1(
            Scs1Envelope(iterations=iterations, salt=salt, iv=iv, ciphertext=ciphertext, mac=mac)
        )

    def unseal(self, envelope: str, passphrase: Passphrase) -> bytes:
        """Verifica y descifra un sobre SCS1.

        Args:
            envelope (str): Cadena SCS1.
            passphrase (Passphrase): Passphrase usada al sellar.

        Returns:
            bytes: Texto en claro original.

        Raises:
            FormatError: Si la cadena no es un SCS1 válido.
            PolicyViolation: Si los campos incumplen los mínimos.
            IntegrityFailure: Si el MAC no coincide (manipulación o passphrase errónea).

        """

        _require_passphrase(passphrase)
        parsed = parse_scs1(envelope)
        logger.debug("unseal: iterations=%s ct_len=%s", parsed.iterations, len(parsed.ciphertext))

        mac_input = bytearray()
        with derive_key(passphrase, parsed.salt, parsed.iterations, DERIVED_KEY_LENGTH) as derived:
            enc_key, mac_key = derived.split(KEY_LENGTH)
            with enc_key, mac_key:
                try:
                    mac_input = bytearray(parsed.iv) + parsed.ciphertext
                    if not verify_mac(mac_input, mac_key.view(), parsed.mac):
                        logger.info("unseal: verificación de MAC fallida")
                        raise IntegrityFailure()
                finally:
                    wipe(mac_input)

                try:
                    return aes_cbc_decrypt(parsed.ciphertext, enc_key.view(), parsed.iv)
                except CryptoBackendFailure:
                    raise IntegrityFailure() from None


def seal(plaintext: bytes, passphrase: Passphrase, iterations: Optional[int] = None) -> str:
    """Atajo de :meth:`SealEngine.seal` con la configuración por defecto."""

    return SealEngine().seal(plaintext, passphrase, iterations)


def unseal(envelope: str, passphrase: Passphrase) -> bytes:
    """Atajo de :meth:`SealEngine.unseal`."""

    return SealEngine().unseal(envelope, passphrase)
