"""
Usage Examples for the AFIP Auth Toolkit
Key generation, CSR creation, login ticket signing and transport lookup
"""

import logging
from pathlib import Path

from afip_auth import (
    CertificateRequestBuilder,
    ConfigLoader,
    Environment,
    KeyMaterialGenerator,
    SignedEnvelopeBuilder,
    TransportRegistry,
    check_response,
    get_client,
)


# =============================================================================
# Example 1: Onboarding (key pair + CSR for the AFIP portal)
# =============================================================================

def onboarding_example(workdir: Path) -> Path:
    """Generate a key pair and the CSR to upload to AFIP"""
    generator = KeyMaterialGenerator()
    key_pair = generator.generate()

    # Written with owner-only permissions
    key_path = generator.store_private_key(key_pair, workdir / "private_key.pem")

    return CertificateRequestBuilder().build_to_file(
        key_path,
        organization_name="My Organization",
        common_name="example.com",
        serial_number="CUIT 20123456789",
        output_path=workdir / "request.csr",
    )


# =============================================================================
# Example 2: Signing a login ticket request for WSAA
# =============================================================================

LOGIN_TICKET_REQUEST = """<?xml version="1.0" encoding="UTF-8"?>
<loginTicketRequest version="1.0">
  <header>
    <uniqueId>4325399</uniqueId>
    <generationTime>2024-01-01T10:00:00-03:00</generationTime>
    <expirationTime>2024-01-01T22:00:00-03:00</expirationTime>
  </header>
  <service>wsfe</service>
</loginTicketRequest>
"""


def signing_example(workdir: Path) -> str:
    """
    Sign the ticket request with the certificate issued by AFIP

    The base64 output is the `in0` argument of WSAA's loginCms.
    """
    builder = SignedEnvelopeBuilder()

    certificate_pem = (workdir / "certificate.crt").read_bytes()
    private_key_pem = (workdir / "private_key.pem").read_bytes()

    return builder.sign_to_base64(
        LOGIN_TICKET_REQUEST.encode("utf-8"),
        certificate_pem,
        private_key_pem,
    )


# =============================================================================
# Example 3: Transport lookup
# =============================================================================

def transport_example() -> None:
    """Resolve services through a registry or the process-wide helpers"""
    # Explicit registry, configured from AFIP_ENVIRONMENT / AFIP_ENDPOINTS
    registry = TransportRegistry(ConfigLoader().load())
    session = registry.resolve("wsaa")
    wsdl_url = registry.get_endpoint("wsaa")

    response = session.get(wsdl_url, timeout=30)
    response.raise_for_status()

    # Process-wide registry
    session = get_client("wsfe", sandbox=True)
    assert session is get_client("ws_sr_padron_a13", sandbox=True)


# =============================================================================
# Example 4: Checking decoded gateway responses
# =============================================================================

def response_check_example(decoded: dict) -> None:
    """Raise GatewayResponseError when the response carries errors"""
    check_response(decoded)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    out = Path("./afip-credentials")
    out.mkdir(exist_ok=True)
    print(f"CSR written to {onboarding_example(out)}")

    registry = TransportRegistry()
    print(registry.lookup("wsaa", Environment.SANDBOX).url)
