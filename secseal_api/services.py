# --------------------------------------------------------------
# File: services.py
# Description: Servicios de sellado, protección por certificado, firma e inspección.
# --------------------------------------------------------------
"""Funciones de la capa de servicios equivalentes a los comandos de SecSeal.

Cada servicio resuelve la entrada (texto, bytes o fichero), obtiene la
passphrase de exactamente un origen, delega en el motor correspondiente y
borra los buffers de passphrase y texto en claro al terminar.
"""

from typing import Optional, Union

from cryptography import x509

from secseal.certificates import CertificateEntry, CertificateSource
from secseal.crypto_hybrid import HybridEngine
from secseal.crypto_seal import SealEngine
from secseal.crypto_sign import SignEngine
from secseal.errors import FormatError, KeySourceFailure
from secseal.formats import SCS1_PREFIX, SCSIG1_PREFIX, SCSPK1_PREFIX, detect_format
from secseal.inspection import inspect
from secseal.logger import get_logger
from secseal.models import EnvelopeMetadata
from secseal.passphrase import resolve_passphrase_source
from secseal.secure_memory import wipe
from secseal.storage import read_text, write_bytes, write_text
from secseal_api.pki import default_certificate_source, load_certificate

Secret = Union[str, bytes, bytearray]

logger = get_logger(__name__)


def _read_input(
    input_string: Optional[str], input_bytes: Optional[bytes], in_file: Optional[str]
) -> bytearray:
    """Obtiene los datos de entrada de exactamente una de las tres opciones.

    Args:
        input_string (Optional[str]): Texto que se codifica en UTF-8.
        input_bytes (Optional[bytes]): Datos binarios.
        in_file (Optional[str]): Ruta de un fichero a leer íntegramente.

    Returns:
        bytearray: Copia mutable de los datos para poder borrarla después.

    Raises:
        ValueError: Si no se indica ninguna entrada o se indica más de una.
        FileNotFoundError: Si ``in_file`` no existe.
    """

    chosen = [value is not None for value in (input_string, input_bytes, in_file)]
    if sum(chosen) != 1:
        raise ValueError("Debe indicarse exactamente una entrada: input_string, input_bytes o in_file.")

    if input_string is not None:
        return bytearray(input_string.encode("utf-8"))
    if input_bytes is not None:
        return bytearray(input_bytes)
    with open(in_file, "rb") as handler:
        return bytearray(handler.read())


def _read_envelope(envelope: Optional[str], in_file: Optional[str]) -> str:
    """Obtiene un sobre o firma desde texto o desde fichero."""

    if (envelope is None) == (in_file is None):
        raise ValueError("Debe indicarse exactamente uno de: envelope o in_file.")
    if in_file is not None:
        return read_text(in_file)
    return envelope.strip()


def _resolve_passphrase(
    passphrase: Optional[Secret], env: Optional[str], keyfile: Optional[str]
) -> bytearray:
    source = resolve_passphrase_source(passphrase=passphrase, env=env, keyfile=keyfile)
    return bytearray(source.get_passphrase())


def protect_secret(
    *,
    input_string: Optional[str] = None,
    input_bytes: Optional[bytes] = None,
    in_file: Optional[str] = None,
    out_file: Optional[str] = None,
    iterations: Optional[int] = None,
    passphrase: Optional[Secret] = None,
    env: Optional[str] = None,
    keyfile: Optional[str] = None,
) -> str:
    """Sella un secreto con passphrase y devuelve el sobre SCS1.

    Args:
        input_string (Optional[str]): Secreto en texto.
        input_bytes (Optional[bytes]): Secreto binario.
        in_file (Optional[str]): Fichero cuyo contenido se sella.
        out_file (Optional[str]): Si se indica, el sobre también se escribe aquí.
        iterations (Optional[int]): Iteraciones PBKDF2; por defecto las de configuración.
        passphrase (Optional[Secret]): Passphrase en memoria.
        env (Optional[str]): Variable de entorno con la passphrase.
        keyfile (Optional[str]): Keyfile con la passphrase.

    Returns:
        str: Sobre SCS1.
    """

    plaintext = _read_input(input_string, input_bytes, in_file)
    secret = bytearray()
    try:
        secret = _resolve_passphrase(passphrase, env, keyfile)
        envelope = SealEngine().seal(bytes(plaintext), secret, iterations)
    finally:
        wipe(secret)
        wipe(plaintext)

    if out_file:
        write_text(out_file, envelope)
        logger.info("protect_secret: sobre escrito en %s", out_file)
    return envelope


def unprotect_secret(
    *,
    envelope: Optional[str] = None,
    in_file: Optional[str] = None,
    out_file: Optional[str] = None,
    as_text: bool = False,
    passphrase: Optional[Secret] = None,
    env: Optional[str] = None,
    keyfile: Optional[str] = None,
    certificates: Optional[CertificateSource] = None,
) -> Union[bytes, str, None]:
    """Abre un sobre SCS1 (passphrase) o SCSPK1 (certificado) según su prefijo.

    Args:
        envelope (Optional[str]): Sobre en texto.
        in_file (Optional[str]): Fichero que contiene el sobre.
        out_file (Optional[str]): Si se indica, el claro se escribe aquí (0600) y no se devuelve.
        as_text (bool): Devuelve el claro decodificado como UTF-8.
        passphrase (Optional[Secret]): Passphrase en memoria (solo SCS1).
        env (Optional[str]): Variable de entorno con la passphrase (solo SCS1).
        keyfile (Optional[str]): Keyfile con la passphrase (solo SCS1).
        certificates (Optional[CertificateSource]): Fuente de certificados para SCSPK1;
            por defecto los almacenes de máquina y usuario.

    Returns:
        Union[bytes, str, None]: Texto en claro, o ``None`` si se escribió en ``out_file``.

    Raises:
        FormatError: Si el sobre es una firma SCSIG1 o no tiene formato conocido.
        FormatError: Si ``as_text`` se pide sobre un claro que no es UTF-8.
        IntegrityFailure: Si la verificación del MAC falla.
    """

    text = _read_envelope(envelope, in_file)
    kind = detect_format(text)

    if kind == SCS1_PREFIX:
        secret = bytearray()
        try:
            secret = _resolve_passphrase(passphrase, env, keyfile)
            plaintext = SealEngine().unseal(text, secret)
        finally:
            wipe(secret)
    elif kind == SCSPK1_PREFIX:
        source = certificates if certificates is not None else default_certificate_source()
        plaintext = HybridEngine(source).unprotect(text)
    else:
        raise FormatError(f"{SCSIG1_PREFIX} es una firma, no un sobre cifrado.")

    logger.debug("unprotect_secret: formato=%s", kind)
    if out_file:
        buffer = bytearray(plaintext)
        try:
            write_bytes(out_file, buffer)
        finally:
            wipe(buffer)
        logger.info("unprotect_secret: claro escrito en %s", out_file)
        return None
    if as_text:
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            raise FormatError("El contenido no es texto UTF-8; use as_text=False.") from None
    return plaintext


def protect_for_certificate(
    *,
    input_string: Optional[str] = None,
    input_bytes: Optional[bytes] = None,
    in_file: Optional[str] = None,
    out_file: Optional[str] = None,
    thumbprint: Optional[str] = None,
    certificate: Union[CertificateEntry, x509.Certificate, None] = None,
    cert_file: Optional[str] = None,
    certificates: Optional[CertificateSource] = None,
) -> str:
    """Protege un secreto para el titular de un certificado RSA (SCSPK1).

    El certificado se indica por huella (buscada en los almacenes), como
    objeto o como fichero PEM; solo se necesita su clave pública.

    Raises:
        KeySourceFailure: Si la huella no corresponde a ningún certificado.
    """

    if sum(value is not None for value in (thumbprint, certificate, cert_file)) != 1:
        raise ValueError("Debe indicarse exactamente uno de: thumbprint, certificate o cert_file.")

    if cert_file is not None:
        certificate = load_certificate(cert_file)
    elif thumbprint is not None:
        source = certificates if certificates is not None else default_certificate_source()
        certificate = source.find_by_thumbprint(thumbprint)
        if certificate is None:
            raise KeySourceFailure(
                f"No se encontró el certificado con huella '{thumbprint}'.", source="certificates"
            )

    plaintext = _read_input(input_string, input_bytes, in_file)
    try:
        envelope = HybridEngine().protect(bytes(plaintext), certificate)
    finally:
        wipe(plaintext)

    if out_file:
        write_text(out_file, envelope)
        logger.info("protect_for_certificate: sobre escrito en %s", out_file)
    return envelope


def new_signature(
    *,
    input_string: Optional[str] = None,
    input_bytes: Optional[bytes] = None,
    in_file: Optional[str] = None,
    out_file: Optional[str] = None,
    iterations: Optional[int] = None,
    passphrase: Optional[Secret] = None,
    env: Optional[str] = None,
    keyfile: Optional[str] = None,
) -> str:
    """Genera una firma SCSIG1 separada de los datos.

    Returns:
        str: Firma SCSIG1 (también escrita en ``out_file`` si se indica).
    """

    data = _read_input(input_string, input_bytes, in_file)
    secret = bytearray()
    try:
        secret = _resolve_passphrase(passphrase, env, keyfile)
        signature = SignEngine().sign(bytes(data), secret, iterations)
    finally:
        wipe(secret)
        wipe(data)

    if out_file:
        write_text(out_file, signature)
        logger.info("new_signature: firma escrita en %s", out_file)
    return signature


def compare_signature(
    *,
    input_string: Optional[str] = None,
    input_bytes: Optional[bytes] = None,
    in_file: Optional[str] = None,
    signature: Optional[str] = None,
    signature_file: Optional[str] = None,
    passphrase: Optional[Secret] = None,
    env: Optional[str] = None,
    keyfile: Optional[str] = None,
) -> bool:
    """Comprueba una firma SCSIG1 contra los datos.

    Returns:
        bool: ``True`` si la firma es válida; ``False`` si no lo es o está mal formada.
    """

    text = _read_envelope(signature, signature_file)
    data = _read_input(input_string, input_bytes, in_file)
    secret = bytearray()
    try:
        secret = _resolve_passphrase(passphrase, env, keyfile)
        valid = SignEngine().verify(bytes(data), text, secret)
    finally:
        wipe(secret)
        wipe(data)

    logger.info("compare_signature: valid=%s", valid)
    return valid


def inspect_envelope(
    *,
    envelope: Optional[str] = None,
    in_file: Optional[str] = None,
    as_json: bool = False,
) -> Union[EnvelopeMetadata, str]:
    """Devuelve los metadatos de un sobre o firma sin descifrarlo.

    Args:
        envelope (Optional[str]): Sobre en texto.
        in_file (Optional[str]): Fichero que contiene el sobre.
        as_json (bool): Devuelve el informe serializado en JSON.

    Returns:
        Union[EnvelopeMetadata, str]: Metadatos o su representación JSON.
    """

    metadata = inspect(_read_envelope(envelope, in_file))
    if as_json:
        return metadata.model_dump_json(indent=2)
    return metadata
