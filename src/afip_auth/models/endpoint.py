"""Service endpoint model"""

from pydantic import BaseModel, Field

from afip_auth.config.gateway_config import Environment


class ServiceEndpoint(BaseModel):
    """Service endpoint model"""

    service_name: str = Field(..., description="Logical service name, e.g. 'wsaa'")
    environment: Environment = Field(..., description="Environment the URL belongs to")
    url: str = Field(..., description="WSDL URL of the service")

    model_config = {"frozen": True}
