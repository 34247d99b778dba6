"""Cryptography module initialization

This module provides the credential primitives for AFIP authentication:
- KeyMaterialGenerator: RSA key pairs
- CertificateRequestBuilder: PKCS#10 CSRs
- SignedEnvelopeBuilder: Detached CMS signatures for login tickets
"""

from afip_auth.crypto.keys import (
    KeyDefaults,
    KeyMaterialGenerator,
    KeyPair,
    load_rsa_private_key,
)
from afip_auth.crypto.csr import CertificateRequestBuilder
from afip_auth.crypto.envelope import SignedEnvelopeBuilder, VerificationResult

__all__ = [
    # Key material
    "KeyDefaults",
    "KeyMaterialGenerator",
    "KeyPair",
    "load_rsa_private_key",
    # CSR
    "CertificateRequestBuilder",
    # Envelopes
    "SignedEnvelopeBuilder",
    "VerificationResult",
]
