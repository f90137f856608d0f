# --------------------------------------------------------------
# File: logger.py
# Description: Logging estructurado con redacción de sobres y firmas.
# --------------------------------------------------------------
"""Logger común para los motores y la capa de servicios.

Los mensajes nunca deben contener claves, passphrases ni texto en claro; el
filtro de redacción es una segunda barrera para las cadenas de sobre que
lleguen a un mensaje por descuido.
"""

import json
import logging
import re
import sys
import time

from secseal import config

__all__ = ["EnvelopeRedactionFilter", "JsonFormatter", "get_logger", "redact"]

# Cualquier token SCS1$..., SCSPK1$... o SCSIG1$... hasta el siguiente espacio o comilla.
ENVELOPE_PATTERN = re.compile(r"\b(SCSPK1|SCSIG1|SCS1)\$[^\s\"']+")


def redact(text: str) -> str:
    """Sustituye el cuerpo de cualquier sobre incrustado por ``[REDACTED]``."""

    return ENVELOPE_PATTERN.sub(r"\1$[REDACTED]", text)


class EnvelopeRedactionFilter(logging.Filter):
    """Filtro que oculta sobres y firmas en mensajes y argumentos."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                redact(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True


class JsonFormatter(logging.Formatter):
    """Serializa cada registro como una línea JSON válida (marca de tiempo UTC)."""

    converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def get_logger(name: str = "secseal", level=None) -> logging.Logger:
    """Devuelve un logger con salida JSON por stdout y redacción activada.

    Args:
        name (str): Nombre jerárquico del logger.
        level (Optional[int | str]): Nivel explícito; por defecto ``config.LOG_LEVEL``.

    Returns:
        logging.Logger: Logger configurado una única vez por nombre.

    """

    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else config.LOG_LEVEL)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter(datefmt="%Y-%m-%dT%H:%M:%SZ"))
        handler.addFilter(EnvelopeRedactionFilter())
        logger.addHandler(handler)
        logger.addFilter(EnvelopeRedactionFilter())

    return logger
