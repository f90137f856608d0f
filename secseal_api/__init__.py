# --------------------------------------------------------------
# File: __init__.py
# Description: Capa de servicios y almacenes de certificados sobre el motor SecSeal.
# --------------------------------------------------------------
"""Inicializa el paquete `secseal_api` y documenta sus módulos principales."""

__all__ = [
    "pki",
    "services",
]
