import logging
from typing import Annotated, Any, Self

from opentelemetry import propagate
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.id_generator import IdGenerator, RandomIdGenerator
from opentelemetry.sdk.trace.sampling import Sampler
from pydantic import BaseModel, ConfigDict, Field, InstanceOf, PrivateAttr

from .basic_types import CallableReference, Clock, PropagationFactory, Reference
from .context import CurrentTraceContext, GlobalCurrentTraceContext
from .endpoint import EndpointFactory
from .ids import Random64BitIdGenerator, SharedSpanIdGenerator
from .logging_utils import log_context
from .settings import TracingFactorySettings
from .tracing import Tracing, TracingRegistry

_logger = logging.getLogger(__name__)


class TracingFactory(BaseModel):
    """Builds a `Tracing` from a flat set of optional properties

    Every property left unset keeps the OpenTelemetry SDK default. Object
    properties take the object itself, a class (instantiated without arguments)
    or a dotted import path, e.g.

        TracingFactory.model_validate(
            {
                "localServiceName": "my-service",
                "sampler": "opentelemetry.sdk.trace.sampling.ALWAYS_OFF",
            }
        )

    The built instance is a singleton of the factory (see `get_object`) which is
    registered as current in `registry`, if given, until `destroy` is called.
    """

    local_service_name: str | None = Field(default=None, alias="localServiceName")
    local_endpoint: EndpointFactory | InstanceOf[Resource] | None = Field(
        default=None, alias="localEndpoint"
    )
    span_reporter: Reference[SpanExporter] | None = Field(
        default=None, alias="spanReporter"
    )
    clock: CallableReference[Clock] | None = None
    sampler: Reference[Sampler] | None = None
    current_trace_context: Reference[CurrentTraceContext] | None = Field(
        default=None, alias="currentTraceContext"
    )
    propagation_factory: CallableReference[PropagationFactory] | None = Field(
        default=None, alias="propagationFactory"
    )
    trace_id_128bit: bool | None = Field(default=None, alias="traceId128Bit")
    supports_join: bool | None = Field(default=None, alias="supportsJoin")

    registry: Annotated[
        InstanceOf[TracingRegistry] | None,
        Field(exclude=True, description="receives the built instance as current"),
    ] = None

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    _instance: Tracing | None = PrivateAttr(default=None)

    @classmethod
    def from_settings(
        cls,
        settings: TracingFactorySettings,
        *,
        registry: TracingRegistry | None = None,
    ) -> Self:
        local_endpoint = None
        if (
            settings.TRACING_LOCAL_ENDPOINT_IP is not None
            or settings.TRACING_LOCAL_ENDPOINT_PORT is not None
        ):
            local_endpoint = EndpointFactory(
                service_name=settings.TRACING_LOCAL_SERVICE_NAME,
                ip=settings.TRACING_LOCAL_ENDPOINT_IP,
                port=settings.TRACING_LOCAL_ENDPOINT_PORT,
            )
        return cls(
            local_service_name=settings.TRACING_LOCAL_SERVICE_NAME,
            local_endpoint=local_endpoint,
            span_reporter=settings.TRACING_SPAN_REPORTER,
            clock=settings.TRACING_CLOCK,
            sampler=settings.TRACING_SAMPLER,
            current_trace_context=settings.TRACING_CURRENT_TRACE_CONTEXT,
            propagation_factory=settings.TRACING_PROPAGATION_FACTORY,
            trace_id_128bit=settings.TRACING_TRACE_ID_128BIT,
            supports_join=settings.TRACING_SUPPORTS_JOIN,
            registry=registry,
        )

    def _create_local_endpoint(self) -> Resource | None:
        if isinstance(self.local_endpoint, EndpointFactory):
            return self.local_endpoint.create()
        if self.local_endpoint is not None:
            return self.local_endpoint
        if self.local_service_name is not None:
            return Resource.create({SERVICE_NAME: self.local_service_name})
        return None

    def _create_id_generator(self) -> IdGenerator | None:
        id_generator: IdGenerator | None = None
        if self.trace_id_128bit is True:
            id_generator = RandomIdGenerator()
        elif self.trace_id_128bit is False:
            id_generator = Random64BitIdGenerator()

        if self.supports_join:
            return SharedSpanIdGenerator(id_generator or RandomIdGenerator())
        return id_generator

    def create(self) -> Tracing:
        """Builds a new instance (not cached)"""
        with log_context(
            _logger,
            logging.DEBUG,
            "building tracing of %s",
            self.local_service_name or "<default service>",
        ):
            tracer_provider = TracerProvider(
                sampler=self.sampler,
                resource=self._create_local_endpoint(),
                id_generator=self._create_id_generator(),
                # NOTE: lifetime is owned by Tracing.close
                shutdown_on_exit=False,
            )
            if self.span_reporter is not None:
                tracer_provider.add_span_processor(
                    SimpleSpanProcessor(self.span_reporter)
                )

            propagation = (
                self.propagation_factory()
                if self.propagation_factory is not None
                else propagate.get_global_textmap()
            )

            tracing = Tracing(
                tracer_provider=tracer_provider,
                propagation=propagation,
                current_trace_context=(
                    self.current_trace_context
                    if self.current_trace_context is not None
                    else GlobalCurrentTraceContext()
                ),
                clock=self.clock,
                span_reporter=self.span_reporter,
                supports_join=bool(self.supports_join),
                registry=self.registry,
            )

        if self.registry is not None:
            self.registry.register(tracing)
        return tracing

    def get_object(self) -> Tracing:
        if self._instance is None:
            self._instance = self.create()
        return self._instance

    def destroy(self) -> None:
        if self._instance is not None:
            instance, self._instance = self._instance, None
            instance.close()

    def __enter__(self) -> Tracing:
        return self.get_object()

    def __exit__(self, *args: Any) -> None:
        self.destroy()
