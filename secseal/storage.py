# --------------------------------------------------------------
# File: storage.py
# Description: Persistencia atómica de keyfiles y ficheros de sobres.
# --------------------------------------------------------------
"""Funciones auxiliares de entrada/salida para el almacenamiento local."""

from __future__ import annotations

import json
import os
from typing import Any, Dict

__all__ = ["load_json", "save_json", "read_text", "write_text", "write_bytes"]


def _ensure_parent_dir(path: str) -> None:
    """Garantiza que exista el directorio padre del archivo de destino."""

    parent = os.path.dirname(path) or "."
    os.makedirs(parent, exist_ok=True)


def _replace_atomically(path: str, data: bytes, mode: int) -> None:
    """Escribe en ``<path>.tmp`` con los permisos indicados y lo renombra."""

    _ensure_parent_dir(path)
    tmp_path = f"{path}.tmp"
    fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as handler:
        handler.write(data)
    os.replace(tmp_path, path)


def load_json(path: str) -> Dict[str, Any]:
    """Carga un documento JSON.

    Args:
        path (str): Ruta del archivo.

    Returns:
        Dict[str, Any]: Documento cargado.

    Raises:
        FileNotFoundError: Si el archivo no existe.
        json.JSONDecodeError: Si el contenido no es JSON.

    """

    with open(path, "r", encoding="utf-8") as handler:
        return json.load(handler)


def save_json(doc: Dict[str, Any], path: str) -> None:
    """Guarda un documento JSON aplicando escritura atómica y permisos 0600."""

    payload = json.dumps(doc, indent=2, ensure_ascii=False).encode("utf-8")
    _replace_atomically(path, payload, 0o600)


def read_text(path: str) -> str:
    """Lee un sobre o firma de disco eliminando espacios iniciales y finales."""

    with open(path, "r", encoding="utf-8") as handler:
        return handler.read().strip()


def write_text(path: str, text: str) -> None:
    """Escribe un sobre o firma en UTF-8 de forma atómica."""

    _replace_atomically(path, text.encode("utf-8"), 0o644)


def write_bytes(path: str, data: bytes) -> None:
    """Escribe texto en claro recuperado con permisos restringidos."""

    _replace_atomically(path, bytes(data), 0o600)
