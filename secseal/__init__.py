# --------------------------------------------------------------
# File: __init__.py
# Description: Exposición pública del motor de sobres autenticados SecSeal.
# --------------------------------------------------------------
"""Inicializa el paquete `secseal` y reexporta su API principal."""

from secseal.certificates import (
    CertificateEntry,
    CertificateSource,
    ChainedCertificateSource,
    InMemoryCertificateStore,
    normalize_thumbprint,
)
from secseal.crypto_hybrid import HybridEngine
from secseal.crypto_seal import SealEngine, seal, unseal
from secseal.crypto_sign import SignEngine, sign, verify
from secseal.errors import (
    CryptoBackendFailure,
    ErrorKind,
    FormatError,
    IntegrityFailure,
    KeySourceFailure,
    PolicyViolation,
    SecSealError,
)
from secseal.inspection import inspect
from secseal.models import EnvelopeMetadata, Scs1Envelope, Scsig1Signature, Scspk1Envelope
from secseal.passphrase import (
    EnvPassphraseSource,
    KeyfilePassphraseSource,
    PassphraseSource,
    StaticPassphraseSource,
    create_keyfile,
    resolve_passphrase_source,
)
from secseal.secure_memory import SecureBuffer, constant_time_equals

__version__ = "1.0.0"

__all__ = [
    "CertificateEntry",
    "CertificateSource",
    "ChainedCertificateSource",
    "CryptoBackendFailure",
    "EnvPassphraseSource",
    "EnvelopeMetadata",
    "ErrorKind",
    "FormatError",
    "HybridEngine",
    "InMemoryCertificateStore",
    "IntegrityFailure",
    "KeySourceFailure",
    "KeyfilePassphraseSource",
    "PassphraseSource",
    "PolicyViolation",
    "Scs1Envelope",
    "Scsig1Signature",
    "Scspk1Envelope",
    "SealEngine",
    "SecSealError",
    "SecureBuffer",
    "SignEngine",
    "StaticPassphraseSource",
    "constant_time_equals",
    "create_keyfile",
    "inspect",
    "normalize_thumbprint",
    "resolve_passphrase_source",
    "seal",
    "sign",
    "unseal",
    "verify",
]
