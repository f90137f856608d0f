# --------------------------------------------------------------
# File: secure_memory.py
# Description: Buffers que se ponen a cero al liberarse y comparación en tiempo constante.
# --------------------------------------------------------------
"""Higiene de memoria para el material de clave transitorio.

Limitación conocida: el borrado es de mejor esfuerzo. CPython y los bindings de
``cryptography`` trabajan con objetos ``bytes`` inmutables, de modo que pueden
existir copias intermedias (claves derivadas devueltas por PBKDF2, argumentos
convertidos, cadenas de la passphrase) que no son alcanzables para ponerlas a
cero. ``SecureBuffer`` reduce la ventana de exposición de las copias que sí
controlamos, pero no ofrece las garantías de un asignador que no mueve memoria.
"""

from __future__ import annotations

from typing import Iterator, Optional, Union

__all__ = ["SecureBuffer", "wipe", "constant_time_equals"]

BytesLike = Union[bytes, bytearray, memoryview]


def wipe(buffer: Optional[bytearray]) -> None:
    """Sobrescribe con ceros un ``bytearray`` in situ.

    Args:
        buffer (Optional[bytearray]): Buffer mutable a limpiar; ``None`` se ignora.

    """

    if buffer is None:
        return
    buffer[:] = bytes(len(buffer))


def constant_time_equals(a: BytesLike, b: BytesLike) -> bool:
    """Compara dos secuencias de bytes sin cortocircuito.

    La longitud no es secreta, así que una diferencia de longitud devuelve
    ``False`` de inmediato. Con longitudes iguales se acumula el XOR de todos
    los bytes, independientemente de la posición del primer desajuste.

    Args:
        a (BytesLike): Primer valor.
        b (BytesLike): Segundo valor.

    Returns:
        bool: ``True`` solo si ambos valores son idénticos.

    """

    if len(a) != len(b):
        return False
    result = 0
    for x, y in zip(a, b):
        result |= x ^ y
    return result == 0


class SecureBuffer:
    """Buffer de bytes con propiedad explícita y borrado garantizado.

    Se usa como gestor de contexto: al salir del bloque (retorno normal,
    excepción o retorno anticipado) el contenido se pone a cero.

    Example:
        >>> with SecureBuffer(derived) as key:
        ...     enc_key, mac_key = key.split(32)
    """

    __slots__ = ("_data", "_wiped")

    def __init__(self, data: Union[BytesLike, int] = 0) -> None:
        # Un entero reserva un buffer de ceros de esa longitud.
        self._data = bytearray(data)
        self._wiped = False

    def __enter__(self) -> "SecureBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[int]:
        return iter(self._data)

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else "live"
        return f"SecureBuffer(len={len(self._data)}, {state})"

    @property
    def wiped(self) -> bool:
        """Indica si el buffer ya se ha limpiado."""

        return self._wiped

    def view(self) -> bytearray:
        """Devuelve el ``bytearray`` subyacente sin copiarlo."""

        if self._wiped:
            raise ValueError("El buffer ya ha sido borrado.")
        return self._data

    def bytes(self) -> bytes:
        """Copia inmutable del contenido (la copia no se podrá borrar)."""

        return bytes(self.view())

    def slice(self, start: int, stop: int) -> "SecureBuffer":
        """Crea un nuevo ``SecureBuffer`` con una porción del contenido."""

        return SecureBuffer(self.view()[start:stop])

    def split(self, at: int) -> "tuple[SecureBuffer, SecureBuffer]":
        """Divide el buffer en dos ``SecureBuffer`` independientes."""

        return self.slice(0, at), self.slice(at, len(self._data))

    def wipe(self) -> None:
        """Pone a cero el contenido. Es idempotente."""

        wipe(self._data)
        self._wiped = True
