from typing import Annotated

from opentelemetry.sdk.trace.export import SpanExporter
from opentelemetry.sdk.trace.sampling import Sampler
from pydantic import Field, IPvAnyAddress
from pydantic_settings import SettingsConfigDict

from .base import BaseCustomSettings
from .basic_types import (
    CallableReference,
    Clock,
    PortInt,
    PropagationFactory,
    Reference,
)
from .context import CurrentTraceContext


class TracingFactorySettings(BaseCustomSettings):
    TRACING_LOCAL_SERVICE_NAME: str | None = None
    TRACING_LOCAL_ENDPOINT_IP: Annotated[
        IPvAnyAddress | None,
        Field(description="IPv4 or IPv6 literal reported as local endpoint"),
    ] = None
    TRACING_LOCAL_ENDPOINT_PORT: PortInt | None = None

    TRACING_SPAN_REPORTER: Annotated[
        Reference[SpanExporter] | None,
        Field(description="dotted path to a span exporter (instance or class)"),
    ] = None
    TRACING_CLOCK: Annotated[
        CallableReference[Clock] | None,
        Field(description="dotted path to a callable returning epoch nanoseconds"),
    ] = None
    TRACING_SAMPLER: Annotated[
        Reference[Sampler] | None,
        Field(description="dotted path to a sampler (instance or class)"),
    ] = None
    TRACING_CURRENT_TRACE_CONTEXT: Annotated[
        Reference[CurrentTraceContext] | None,
        Field(description="dotted path to a runtime-context strategy"),
    ] = None
    TRACING_PROPAGATION_FACTORY: Annotated[
        CallableReference[PropagationFactory] | None,
        Field(description="dotted path to a callable returning a text-map propagator"),
    ] = None

    TRACING_TRACE_ID_128BIT: Annotated[
        bool | None,
        Field(description="False selects 64-bit trace ids. Defaults to the SDK's"),
    ] = None
    TRACING_SUPPORTS_JOIN: Annotated[
        bool | None,
        Field(description="reuse incoming span ids. Defaults to creating child spans"),
    ] = None

    model_config = SettingsConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "TRACING_LOCAL_SERVICE_NAME": "brave-webmvc-example",
                    "TRACING_LOCAL_ENDPOINT_IP": "1.2.3.4",
                    "TRACING_LOCAL_ENDPOINT_PORT": 8080,
                    "TRACING_SPAN_REPORTER": "opentelemetry.sdk.trace.export.ConsoleSpanExporter",
                    "TRACING_SAMPLER": "opentelemetry.sdk.trace.sampling.ALWAYS_ON",
                    "TRACING_PROPAGATION_FACTORY": "tracing_factory.propagation.B3_FACTORY",
                    "TRACING_TRACE_ID_128BIT": True,
                    "TRACING_SUPPORTS_JOIN": False,
                },
                {},
            ],
        }
    )
