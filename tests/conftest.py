# --------------------------------------------------------------
# File: conftest.py
# Description: Fixtures compartidas para aislar almacenamiento, recargar la configuración y generar certificados.
# --------------------------------------------------------------

import importlib
from typing import Iterator

import pytest

from secseal.certificates import CertificateEntry

# Iteraciones mínimas para que las pruebas de derivación sean rápidas.
FAST_ITERATIONS = 10000


@pytest.fixture(autouse=True)
def _isolate_storage(tmp_path, monkeypatch) -> Iterator[None]:
    """Aísla STORAGE_PATH y los almacenes de certificados y recarga secseal.config.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar variables de entorno.

    Returns:
        Iterator[None]: Control del fixture autouse durante la ejecución de cada test.
    """
    data_dir = tmp_path / "_data"
    data_dir.mkdir()
    monkeypatch.setenv("STORAGE_PATH", str(data_dir))
    monkeypatch.setenv("SECSEAL_MACHINE_STORE", str(data_dir / "certs" / "machine"))
    monkeypatch.setenv("SECSEAL_USER_STORE", str(data_dir / "certs" / "user"))
    monkeypatch.setenv("SECSEAL_ITERATIONS", str(FAST_ITERATIONS))
    monkeypatch.setenv("SECSEAL_KEYFILE_SECRET", "test_master_secret")

    import secseal.config as config_module

    importlib.reload(config_module)

    yield
    # tmp_path se limpia automáticamente por pytest


@pytest.fixture(scope="session")
def rsa_identity():
    """Par RSA y certificado autofirmado compartidos por toda la sesión.

    Returns:
        tuple[rsa.RSAPrivateKey, x509.Certificate]: Clave privada y certificado.
    """
    from secseal_api.pki import issue_self_signed_rsa_cert

    return issue_self_signed_rsa_cert("SecSeal Test A")


@pytest.fixture(scope="session")
def other_rsa_identity():
    """Segundo par RSA para comprobar el rechazo con una clave distinta."""
    from secseal_api.pki import issue_self_signed_rsa_cert

    return issue_self_signed_rsa_cert("SecSeal Test B")


@pytest.fixture
def certificate_entry(rsa_identity) -> CertificateEntry:
    """Entrada de certificado con clave privada accesible."""
    private_key, certificate = rsa_identity
    return CertificateEntry(certificate, private_key)
