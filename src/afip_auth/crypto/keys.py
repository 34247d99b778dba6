"""
RSA key material generation
Creates the key pairs used for CSRs and login-ticket signatures
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    load_der_private_key,
)

from afip_auth.crypto.pem import PRIVATE_KEY_LABELS, decode_block
from afip_auth.exceptions import InvalidKeyFormatError, KeyGenerationError, KeyParseError, KeyStorageError


class KeyDefaults:
    """Default values for key operations"""
    KEY_SIZE = 2048
    PUBLIC_EXPONENT = 65537
    KEY_FILE_PERMISSIONS = 0o600


@dataclass(frozen=True)
class KeyPair:
    """
    RSA key pair

    Attributes:
        private_key: The RSA private key; the public half is derived from it
    """
    private_key: RSAPrivateKey

    @property
    def public_key(self) -> RSAPublicKey:
        return self.private_key.public_key()

    @property
    def key_size(self) -> int:
        return self.private_key.key_size


class KeyMaterialGenerator:
    """
    Generates and serializes RSA key pairs

    Example:
        >>> generator = KeyMaterialGenerator()
        >>> key_pair = generator.generate()
        >>> generator.store_private_key(key_pair, './afip/private_key.pem')

    Security Notes:
        - Private keys are never logged
        - Stored key files are restricted to the owner (0600)
    """

    def generate(self) -> KeyPair:
        """
        Generate a new 2048-bit RSA key pair

        Raises:
            KeyGenerationError: If the random source or backend fails
        """
        try:
            private_key = rsa.generate_private_key(
                public_exponent=KeyDefaults.PUBLIC_EXPONENT,
                key_size=KeyDefaults.KEY_SIZE,
            )
        except Exception as e:
            raise KeyGenerationError(
                f"Failed to generate key pair: {e}",
                cause=e
            ) from e

        return KeyPair(private_key=private_key)

    def serialize(self, key_pair: KeyPair) -> bytes:
        """Encode the private key as an unencrypted "RSA PRIVATE KEY" PEM block"""
        return key_pair.private_key.private_bytes(
            encoding=Encoding.PEM,
            format=PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=NoEncryption(),
        )

    def store_private_key(self, key_pair: KeyPair, file_path: Union[str, Path]) -> Path:
        """
        Write the serialized private key to a file with owner-only permissions

        Args:
            key_pair: Key pair to store
            file_path: Destination file path

        Returns:
            Resolved path of the written file

        Raises:
            KeyStorageError: If the file cannot be written
        """
        path = Path(file_path)
        key_bytes = self.serialize(key_pair)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, KeyDefaults.KEY_FILE_PERMISSIONS)
            with os.fdopen(fd, "wb") as f:
                f.write(key_bytes)
            os.chmod(path, KeyDefaults.KEY_FILE_PERMISSIONS)
        except OSError as e:
            raise KeyStorageError(
                f"Failed to store private key: {e}",
                cause=e
            ) from e

        return path.resolve()


def load_rsa_private_key(private_key_pem: Union[str, bytes]) -> RSAPrivateKey:
    """
    Decode and parse an RSA private key PEM block

    Accepts PKCS#1 ("RSA PRIVATE KEY") and unencrypted PKCS#8 ("PRIVATE KEY").

    Raises:
        InvalidKeyFormatError: If the block is missing or mislabelled
        KeyParseError: If the bytes are not an RSA private key
    """
    der_bytes = decode_block(
        private_key_pem, PRIVATE_KEY_LABELS, InvalidKeyFormatError, "private key"
    )

    try:
        private_key = load_der_private_key(der_bytes, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyParseError(
            "Failed to parse RSA private key",
            cause=e
        ) from e

    if not isinstance(private_key, RSAPrivateKey):
        raise KeyParseError(
            f"Unsupported key type: {type(private_key).__name__}. "
            "Only RSA keys are supported."
        )

    return private_key
