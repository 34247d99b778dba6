"""
Detached CMS/PKCS7 signed envelopes
Wraps WSAA login-ticket requests for the loginCms call

The envelope is a DER SignedData structure with one signer, the signer
certificate embedded, and the signed content left out (detached). A
verifier must be handed the original payload separately.
"""

import base64
from dataclasses import dataclass
from typing import Dict, Optional, Type, Union

from asn1crypto import cms
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from cryptography.hazmat.primitives.serialization import Encoding, pkcs7

from afip_auth.crypto.keys import load_rsa_private_key
from afip_auth.crypto.pem import CERTIFICATE_LABELS, decode_block
from afip_auth.exceptions import (
    CertificateParseError,
    EnvelopeFinalizeError,
    EnvelopeInitError,
    InvalidCertificateFormatError,
    SignerAttachError,
)


_DIGESTS: Dict[str, Type[hashes.HashAlgorithm]] = {
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


@dataclass
class VerificationResult:
    """Envelope verification result"""
    valid: bool
    error: Optional[str] = None
    certificate: Optional[x509.Certificate] = None


class SignedEnvelopeBuilder:
    """
    Builds and verifies detached CMS signatures

    Example:
        >>> builder = SignedEnvelopeBuilder()
        >>> envelope = builder.sign(tra_xml, cert_pem, key_pem)
        >>> builder.verify(envelope, tra_xml).valid
        True
    """

    DIGEST = hashes.SHA256

    def sign(
        self,
        payload: bytes,
        certificate_pem: Union[str, bytes],
        private_key_pem: Union[str, bytes],
    ) -> bytes:
        """
        Sign ``payload`` and return a detached DER SignedData

        Each step fails fast; no partial result is ever returned.

        Raises:
            InvalidKeyFormatError: Key block missing or mislabelled
            KeyParseError: Key is malformed or not RSA
            InvalidCertificateFormatError: Certificate block missing or mislabelled
            CertificateParseError: Certificate is not valid X.509
            EnvelopeInitError: Signed data cannot be set up over the payload
            SignerAttachError: Certificate/key cannot be attached as signer
            EnvelopeFinalizeError: Serialization failed
        """
        private_key = load_rsa_private_key(private_key_pem)
        certificate = self._load_certificate(certificate_pem)

        try:
            builder = pkcs7.PKCS7SignatureBuilder().set_data(payload)
        except (TypeError, ValueError) as e:
            raise EnvelopeInitError(
                f"Failed to create signed data: {e}",
                cause=e
            ) from e

        cert_public_key = certificate.public_key()
        if not isinstance(cert_public_key, RSAPublicKey) or (
            cert_public_key.public_numbers() != private_key.public_key().public_numbers()
        ):
            raise SignerAttachError("Certificate does not match the private key")

        try:
            builder = builder.add_signer(certificate, private_key, self.DIGEST())
        except (TypeError, ValueError) as e:
            raise SignerAttachError(
                f"Failed to add signer to PKCS7: {e}",
                cause=e
            ) from e

        # Binary keeps the payload bytes exactly as given (no CRLF rewriting).
        options = [
            pkcs7.PKCS7Options.DetachedSignature,
            pkcs7.PKCS7Options.Binary,
            pkcs7.PKCS7Options.NoCapabilities,
        ]

        try:
            return builder.sign(Encoding.DER, options)
        except Exception as e:
            raise EnvelopeFinalizeError(
                f"Failed to finalize PKCS7 signature: {e}",
                cause=e
            ) from e

    def sign_to_base64(
        self,
        payload: bytes,
        certificate_pem: Union[str, bytes],
        private_key_pem: Union[str, bytes],
    ) -> str:
        """Sign and return the envelope as base64 text, as loginCms expects"""
        envelope = self.sign(payload, certificate_pem, private_key_pem)
        return base64.b64encode(envelope).decode("ascii")

    def verify(self, envelope: bytes, payload: bytes) -> VerificationResult:
        """
        Verify a detached envelope against the original payload

        Uses only the certificate embedded in the envelope.

        Args:
            envelope: DER SignedData produced by ``sign``
            payload: The bytes that were signed

        Returns:
            Verification result
        """
        try:
            content_info = cms.ContentInfo.load(envelope)
            if content_info["content_type"].native != "signed_data":
                return VerificationResult(valid=False, error="Not a CMS SignedData structure")

            signed_data = content_info["content"]

            if signed_data["encap_content_info"]["content"].native is not None:
                return VerificationResult(valid=False, error="Envelope is not detached")

            signer_infos = signed_data["signer_infos"]
            if len(signer_infos) != 1:
                return VerificationResult(
                    valid=False,
                    error=f"Expected exactly one signer, found {len(signer_infos)}"
                )
            signer_info = signer_infos[0]

            certificate = self._find_signer_certificate(signed_data, signer_info)
            if certificate is None:
                return VerificationResult(valid=False, error="Signer certificate not embedded")

            digest_name = signer_info["digest_algorithm"]["algorithm"].native
            digest_cls = _DIGESTS.get(digest_name)
            if digest_cls is None:
                return VerificationResult(
                    valid=False,
                    error=f"Unsupported digest algorithm: {digest_name}"
                )

            declared = {
                algo["algorithm"].native for algo in signed_data["digest_algorithms"]
            }
            if digest_name not in declared:
                return VerificationResult(
                    valid=False,
                    error=f"Signer digest algorithm {digest_name} not declared in SignedData"
                )

            signed_attrs = signer_info["signed_attrs"]
            if signed_attrs.native is None:
                return VerificationResult(valid=False, error="Signed attributes missing")

            message_digest = None
            content_type = None
            for attr in signed_attrs:
                attr_type = attr["type"].native
                if attr_type == "message_digest":
                    message_digest = attr["values"][0].native
                elif attr_type == "content_type":
                    content_type = attr["values"][0].native

            encap_type = signed_data["encap_content_info"]["content_type"].native
            if content_type != encap_type:
                return VerificationResult(
                    valid=False,
                    error=f"Signed content type {content_type} does not match {encap_type}"
                )

            hasher = hashes.Hash(digest_cls())
            hasher.update(payload)
            if message_digest != hasher.finalize():
                return VerificationResult(
                    valid=False,
                    error="Message digest does not match payload",
                    certificate=certificate
                )

            public_key = certificate.public_key()
            if not isinstance(public_key, RSAPublicKey):
                return VerificationResult(
                    valid=False,
                    error="Signer certificate does not hold an RSA key",
                    certificate=certificate
                )

            # Signed attributes are signed as an explicit SET OF, not [0] IMPLICIT.
            public_key.verify(
                signer_info["signature"].native,
                signed_attrs.untag().dump(),
                padding.PKCS1v15(),
                digest_cls(),
            )

            return VerificationResult(valid=True, certificate=certificate)

        except InvalidSignature:
            return VerificationResult(valid=False, error="Signature verification failed")
        except (ValueError, TypeError, KeyError) as e:
            return VerificationResult(valid=False, error=f"Malformed envelope: {e}")

    # Private methods

    def _load_certificate(self, certificate_pem: Union[str, bytes]) -> x509.Certificate:
        """Decode and parse the signer certificate"""
        der_bytes = decode_block(
            certificate_pem, CERTIFICATE_LABELS, InvalidCertificateFormatError, "certificate"
        )

        try:
            return x509.load_der_x509_certificate(der_bytes)
        except ValueError as e:
            raise CertificateParseError(
                "Failed to parse X509 certificate",
                cause=e
            ) from e

    def _find_signer_certificate(
        self,
        signed_data: cms.SignedData,
        signer_info: cms.SignerInfo,
    ) -> Optional[x509.Certificate]:
        """Return the embedded certificate named by the signer identifier"""
        if signed_data["certificates"].native is None:
            return None

        sid = signer_info["sid"]
        if sid.name != "issuer_and_serial_number":
            return None

        wanted = sid.chosen
        for choice in signed_data["certificates"]:
            if choice.name != "certificate":
                continue
            candidate = choice.chosen
            if (
                candidate.serial_number == wanted["serial_number"].native
                and candidate.issuer == wanted["issuer"]
            ):
                return x509.load_der_x509_certificate(candidate.dump())

        return None
