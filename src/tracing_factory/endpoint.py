from typing import Final

from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.util.types import AttributeValue
from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress

from .basic_types import PortInt

NET_HOST_IP: Final[str] = "net.host.ip"
NET_HOST_PORT: Final[str] = "net.host.port"


class EndpointFactory(BaseModel):
    """Describes the network endpoint of the local service

    The result of `create` is an OpenTelemetry resource which is what the SDK
    attaches to every span produced by a tracer provider.
    """

    service_name: str | None = Field(default=None, alias="serviceName")
    ip: IPvAnyAddress | None = Field(
        default=None, description="IPv4 or IPv6 literal of the local host"
    )
    port: PortInt | None = None

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        extra="forbid",
        json_schema_extra={
            "examples": [
                {"serviceName": "brave-webmvc-example", "ip": "1.2.3.4", "port": 8080},
                {"serviceName": "ipv6-service", "ip": "2001:db8::c001"},
                {"serviceName": "name-only"},
            ]
        },
    )

    def attributes(self) -> dict[str, AttributeValue]:
        attributes: dict[str, AttributeValue] = {}
        if self.service_name is not None:
            attributes[SERVICE_NAME] = self.service_name
        if self.ip is not None:
            attributes[NET_HOST_IP] = f"{self.ip}"
        if self.port is not None:
            attributes[NET_HOST_PORT] = self.port
        return attributes

    def create(self) -> Resource:
        return Resource.create(self.attributes())
