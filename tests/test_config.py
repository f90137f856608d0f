# --------------------------------------------------------------
# File: test_config.py
# Description: Pruebas de la lectura de configuración desde el entorno.
# --------------------------------------------------------------

import importlib
import logging

import pytest

import secseal.config as config
from secseal.errors import PolicyViolation


def _reload():
    return importlib.reload(config)


def test_iterations_from_environment(monkeypatch):
    """Comprueba que SECSEAL_ITERATIONS fije las iteraciones por defecto.

    Args:
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar el entorno.

    Returns:
        None: Las aserciones revisan el valor leído.
    """
    monkeypatch.setenv("SECSEAL_ITERATIONS", "150000")
    assert _reload().DEFAULT_ITERATIONS == 150000


def test_iterations_never_below_floor(monkeypatch):
    monkeypatch.setenv("SECSEAL_ITERATIONS", "500")
    assert _reload().DEFAULT_ITERATIONS == config.MIN_ITERATIONS == 10000


def test_defaults_without_environment(monkeypatch):
    """Sin variables definidas se usan los valores por defecto documentados."""
    for name in ("SECSEAL_ITERATIONS", "SECSEAL_MACHINE_STORE", "SECSEAL_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("STORAGE_PATH", "/srv/secseal")
    reloaded = _reload()
    assert reloaded.DEFAULT_ITERATIONS == 200000
    assert reloaded.MACHINE_STORE.replace("\\", "/") == "/srv/secseal/certs/machine"
    assert reloaded.LOG_LEVEL == "WARNING"


def test_log_level_is_normalised(monkeypatch):
    monkeypatch.setenv("SECSEAL_LOG_LEVEL", "debug")
    assert _reload().LOG_LEVEL == "DEBUG"


def test_iterations_below_floor_logs_warning(monkeypatch, caplog):
    """Un valor por debajo del mínimo se eleva y queda registrado."""
    monkeypatch.setenv("SECSEAL_ITERATIONS", "500")
    with caplog.at_level(logging.WARNING, logger="secseal.config"):
        _reload()
    assert "SECSEAL_ITERATIONS=500" in caplog.text


@pytest.mark.parametrize("raw", ["muchas", "1e5", "200000.0"])
def test_iterations_not_integer_raises_policy_violation(monkeypatch, raw):
    """Un valor no entero falla nombrando la variable.

    Args:
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar el entorno.
        raw (str): Valor inválido de SECSEAL_ITERATIONS.

    Returns:
        None: Se espera PolicyViolation.
    """
    monkeypatch.setenv("SECSEAL_ITERATIONS", raw)
    with pytest.raises(PolicyViolation, match="SECSEAL_ITERATIONS"):
        _reload()
