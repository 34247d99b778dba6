"""
PKCS#10 certificate signing requests
Builds the CSR submitted to AFIP to obtain the WSAA certificate
"""

from pathlib import Path
from typing import Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

from afip_auth.crypto.keys import load_rsa_private_key
from afip_auth.exceptions import CSRGenerationError, KeyStorageError


class CertificateRequestBuilder:
    """
    Builds PKCS#10 CSRs whose subject holds exactly O, CN and serialNumber

    Example:
        >>> builder = CertificateRequestBuilder()
        >>> csr_pem = builder.build(key_pem, 'Acme SA', 'acme', 'CUIT 20123456789')
    """

    def build(
        self,
        private_key_pem: Union[str, bytes],
        organization_name: str,
        common_name: str,
        serial_number: str,
    ) -> bytes:
        """
        Generate a CSR signed with the given private key

        Args:
            private_key_pem: RSA private key PEM ("PRIVATE KEY" or "RSA PRIVATE KEY")
            organization_name: Organization (O)
            common_name: Common Name (CN)
            serial_number: Subject serialNumber, e.g. "CUIT 20123456789"

        Returns:
            CSR in PEM format, labelled "CERTIFICATE REQUEST"

        Raises:
            InvalidKeyFormatError: If the key block is missing or mislabelled
            KeyParseError: If the key is malformed or not RSA
            CSRGenerationError: If the request cannot be built or signed
        """
        private_key = load_rsa_private_key(private_key_pem)

        try:
            subject = x509.Name([
                x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization_name),
                x509.NameAttribute(NameOID.COMMON_NAME, common_name),
                x509.NameAttribute(NameOID.SERIAL_NUMBER, serial_number),
            ])

            csr = (
                x509.CertificateSigningRequestBuilder()
                .subject_name(subject)
                .sign(private_key, hashes.SHA256())
            )

            return csr.public_bytes(Encoding.PEM)

        except Exception as e:
            raise CSRGenerationError(
                f"Failed to generate CSR: {e}",
                cause=e
            ) from e

    def build_to_file(
        self,
        private_key_path: Union[str, Path],
        organization_name: str,
        common_name: str,
        serial_number: str,
        output_path: Union[str, Path],
    ) -> Path:
        """
        Read a key file, build the CSR and write it to ``output_path``

        Raises:
            KeyStorageError: If the key cannot be read or the CSR written
        """
        try:
            with open(private_key_path, "rb") as f:
                private_key_pem = f.read()
        except OSError as e:
            raise KeyStorageError(f"Failed to read private key: {e}", cause=e) from e

        csr_pem = self.build(private_key_pem, organization_name, common_name, serial_number)

        out = Path(output_path)
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            with open(out, "wb") as f:
                f.write(csr_pem)
        except OSError as e:
            raise KeyStorageError(f"Failed to store CSR: {e}", cause=e) from e

        return out.resolve()
