# --------------------------------------------------------------
# File: config.py
# Description: Parámetros de ejecución leídos del entorno y de un fichero .env.
# --------------------------------------------------------------
"""Configuración de SecSeal.

Los valores se resuelven una sola vez al importar el módulo y no cambian
después; las pruebas los redefinen con ``monkeypatch.setenv`` seguido de
``importlib.reload``.
"""

import logging
import os

from dotenv import load_dotenv

from secseal.errors import PolicyViolation

load_dotenv()

# secseal.logger importa este módulo.
_logger = logging.getLogger(__name__)

# Suelo de iteraciones PBKDF2 aceptado por los formatos SCS1 y SCSIG1.
MIN_ITERATIONS = 10000


def _read_iterations(name: str, default: int) -> int:
    """Lee un número de iteraciones del entorno aplicando el suelo PBKDF2.

    Args:
        name (str): Variable de entorno.
        default (int): Valor si la variable no existe.

    Returns:
        int: Iteraciones efectivas, nunca por debajo de ``MIN_ITERATIONS``.

    Raises:
        PolicyViolation: Si la variable no es un entero decimal.
    """

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise PolicyViolation(f"{name} debe ser un entero, no '{raw}'.") from None
    if value < MIN_ITERATIONS:
        _logger.warning("%s=%d por debajo del mínimo; se usa %d", name, value, MIN_ITERATIONS)
        return MIN_ITERATIONS
    return value


DEFAULT_ITERATIONS = _read_iterations("SECSEAL_ITERATIONS", 200000)

DATA_DIR = os.getenv("STORAGE_PATH", "./_data")
MACHINE_STORE = os.getenv("SECSEAL_MACHINE_STORE", os.path.join(DATA_DIR, "certs", "machine"))
USER_STORE = os.getenv(
    "SECSEAL_USER_STORE", os.path.join(os.path.expanduser("~"), ".secseal", "certs")
)

# Secreto que protege los keyfiles de passphrase (equivalente a la clave DPAPI del usuario).
KEYFILE_SECRET = os.getenv("SECSEAL_KEYFILE_SECRET", "change_this_dev_secret").encode("utf-8")

LOG_LEVEL = os.getenv("SECSEAL_LOG_LEVEL", "WARNING").upper()
