# --------------------------------------------------------------
# File: test_secure_memory.py
# Description: Pruebas de los buffers con borrado y la comparación en tiempo constante.
# --------------------------------------------------------------

import pytest

from secseal.secure_memory import SecureBuffer, constant_time_equals, wipe


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (b"", b"", True),
        (b"abc", b"abc", True),
        (b"abc", b"abd", False),
        (b"\x00" * 32, b"\x00" * 31 + b"\x01", False),
        (b"abc", b"abcd", False),  # longitudes distintas
    ],
)
def test_constant_time_equals(a, b, expected):
    """Comprueba la igualdad en tiempo constante para casos iguales y distintos.

    Returns:
        None: Las aserciones comparan con el resultado esperado.
    """
    assert constant_time_equals(a, b) is expected
    assert constant_time_equals(bytearray(a), memoryview(b)) is expected


class _NoCopyBuffer(bytearray):
    def __bytes__(self):
        raise AssertionError("se ha creado una copia inmutable")


def test_constant_time_equals_reads_buffers_in_place():
    """La comparación recorre los buffers sin convertirlos a ``bytes``.

    Returns:
        None: La comparación no debe invocar ``__bytes__``.
    """
    tag = _NoCopyBuffer(b"\x01" * 32)
    assert constant_time_equals(tag, _NoCopyBuffer(b"\x01" * 32)) is True
    wipe(tag)
    assert tag == bytearray(32)


def test_wipe_zeroes_bytearray():
    """Verifica que wipe ponga a cero el contenido sin cambiar la longitud."""
    buffer = bytearray(b"secret-key")
    wipe(buffer)
    assert buffer == bytearray(10)
    wipe(None)


def test_secure_buffer_wipes_on_exit():
    """Garantiza que el contexto borre el buffer al salir.

    Returns:
        None: Las aserciones revisan el estado tras el bloque ``with``.
    """
    with SecureBuffer(b"\x11" * 8) as key:
        data = key.view()
        assert bytes(data) == b"\x11" * 8
    assert key.wiped
    assert data == bytearray(8)
    with pytest.raises(ValueError):
        key.view()


def test_secure_buffer_wipes_on_exception():
    """Comprueba que el borrado también ocurre cuando el bloque lanza una excepción.

    Returns:
        None: Se captura la excepción y se revisa el buffer.
    """
    holder = {}
    with pytest.raises(RuntimeError):
        with SecureBuffer(b"\xff" * 4) as key:
            holder["data"] = key.view()
            raise RuntimeError("boom")
    assert holder["data"] == bytearray(4)


def test_secure_buffer_split_is_independent():
    """Valida que split produzca copias independientes del original."""
    with SecureBuffer(bytes(range(64))) as derived:
        enc_key, mac_key = derived.split(32)
    assert derived.wiped
    assert enc_key.bytes() == bytes(range(32))
    assert mac_key.bytes() == bytes(range(32, 64))
    enc_key.wipe()
    enc_key.wipe()  # idempotente
    assert enc_key.wiped and not mac_key.wiped


def test_secure_buffer_from_length_and_repr():
    """Un entero reserva un buffer de ceros y repr no muestra el contenido."""
    buffer = SecureBuffer(16)
    assert len(buffer) == 16
    assert list(buffer) == [0] * 16
    assert "live" in repr(buffer)
    buffer.wipe()
    assert "wiped" in repr(buffer)
