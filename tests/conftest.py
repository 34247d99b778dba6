"""
Shared fixtures: RSA keys and self-signed certificates
"""

from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, NoEncryption, PrivateFormat
from cryptography.x509.oid import NameOID

from afip_auth.crypto import KeyMaterialGenerator, KeyPair


def make_certificate(private_key, common_name: str = "afip-test") -> bytes:
    """Build a self-signed certificate PEM for ``private_key``"""
    name = x509.Name([
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Test Org"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        x509.NameAttribute(NameOID.SERIAL_NUMBER, "CUIT 20123456789"),
    ])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=30))
        .sign(private_key, hashes.SHA256())
    )
    return cert.public_bytes(Encoding.PEM)


@pytest.fixture(scope="session")
def generator() -> KeyMaterialGenerator:
    return KeyMaterialGenerator()


@pytest.fixture(scope="session")
def key_pair(generator: KeyMaterialGenerator) -> KeyPair:
    return generator.generate()


@pytest.fixture(scope="session")
def key_pem(generator: KeyMaterialGenerator, key_pair: KeyPair) -> bytes:
    return generator.serialize(key_pair)


@pytest.fixture(scope="session")
def pkcs8_key_pem(key_pair: KeyPair) -> bytes:
    return key_pair.private_key.private_bytes(
        Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()
    )


@pytest.fixture(scope="session")
def certificate_pem(key_pair: KeyPair) -> bytes:
    return make_certificate(key_pair.private_key)


@pytest.fixture(scope="session")
def other_key_pair(generator: KeyMaterialGenerator) -> KeyPair:
    return generator.generate()


@pytest.fixture(scope="session")
def ec_key_pem() -> bytes:
    key = ec.generate_private_key(ec.SECP256R1())
    return key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())


@pytest.fixture(scope="session")
def certificate_factory():
    return make_certificate
