"""Models module initialization"""

from afip_auth.models.endpoint import ServiceEndpoint

__all__ = ["ServiceEndpoint"]
