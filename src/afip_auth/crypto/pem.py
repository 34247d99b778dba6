"""
PEM block decoding shared by the credential builders
"""

from typing import Tuple, Type, Union

from asn1crypto import pem

from afip_auth.exceptions import AfipError


PRIVATE_KEY_LABELS: Tuple[str, ...] = ("PRIVATE KEY", "RSA PRIVATE KEY")
CERTIFICATE_LABELS: Tuple[str, ...] = ("CERTIFICATE",)


def decode_block(
    data: Union[str, bytes],
    accepted_labels: Tuple[str, ...],
    error_cls: Type[AfipError],
    what: str,
) -> bytes:
    """
    Decode the first PEM block in ``data`` and check its label

    Args:
        data: PEM text, as str or bytes
        accepted_labels: Labels allowed on the block
        error_cls: Exception raised when the block is missing or mislabelled
        what: Human name of the expected object, used in messages

    Returns:
        DER bytes of the block

    Raises:
        error_cls: If no block is found or its label is not accepted
    """
    if isinstance(data, str):
        try:
            pem_bytes = data.encode("ascii")
        except UnicodeEncodeError as e:
            raise error_cls(
                f"Invalid {what} format: PEM text must be ASCII",
                cause=e
            ) from e
    else:
        pem_bytes = data

    if not isinstance(pem_bytes, bytes) or not pem.detect(pem_bytes):
        raise error_cls(f"Invalid {what} format: no PEM block found")

    try:
        label, _headers, der_bytes = pem.unarmor(pem_bytes)
    except ValueError as e:
        raise error_cls(f"Invalid {what} format: {e}", cause=e) from e

    if label not in accepted_labels:
        raise error_cls(
            f"Invalid {what} format: unexpected PEM label {label!r}",
            details={"label": label, "accepted": list(accepted_labels)},
        )

    return der_bytes
