"""Gateway response checks"""

from typing import Any, Mapping

from afip_auth.exceptions import GatewayResponseError


def check_response(response: Mapping[str, Any]) -> None:
    """
    Raise if a decoded gateway response carries errors

    Args:
        response: Decoded response body

    Raises:
        GatewayResponseError: If the "Errors" entry is present and non-empty
    """
    errors = response.get("Errors")
    if not errors:
        return

    # A lone error object (dict or text) is wrapped; sequences are flattened.
    if isinstance(errors, (list, tuple)):
        raise GatewayResponseError(list(errors))
    raise GatewayResponseError([errors])
