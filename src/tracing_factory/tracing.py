import logging
from dataclasses import dataclass, field

from opentelemetry.propagators.textmap import TextMapPropagator
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SpanExporter
from opentelemetry.sdk.trace.sampling import Sampler
from opentelemetry.trace import Span, get_current_span

from .basic_types import Clock
from .context import CurrentTraceContext
from .ids import Random64BitIdGenerator, SharedSpanIdGenerator
from .logging_utils import log_context
from .tracer import DEFAULT_TRACER_NAME, ScopedTracer

_logger = logging.getLogger(__name__)


class TracingRegistry:
    """Slot holding the tracing instance considered 'current'

    Passed explicitly to whoever builds or looks up tracing instead of living in a
    module global. The first registered instance wins until it is released.
    """

    def __init__(self) -> None:
        self._current: Tracing | None = None

    @property
    def current(self) -> "Tracing | None":
        return self._current

    def register(self, tracing: "Tracing") -> bool:
        if self._current is None:
            self._current = tracing
            return True
        _logger.debug(
            "Tracing of %s not registered: %s is already current",
            tracing.service_name,
            self._current.service_name,
        )
        return False

    def release(self, tracing: "Tracing") -> None:
        if self._current is tracing:
            self._current = None


@dataclass(frozen=True)
class Tracing:
    """Tracing built from a configuration. Immutable once created."""

    tracer_provider: TracerProvider
    propagation: TextMapPropagator
    current_trace_context: CurrentTraceContext
    clock: Clock | None = None
    span_reporter: SpanExporter | None = None
    supports_join: bool = False
    registry: TracingRegistry | None = field(default=None, repr=False, compare=False)

    @property
    def local_endpoint(self) -> Resource:
        return self.tracer_provider.resource

    @property
    def service_name(self) -> str | None:
        name = self.local_endpoint.attributes.get(SERVICE_NAME)
        return None if name is None else f"{name}"

    @property
    def sampler(self) -> Sampler:
        return self.tracer_provider.sampler

    @property
    def trace_id_128bit(self) -> bool:
        """False only when the provider generates 64-bit trace ids"""
        id_generator = self.tracer_provider.id_generator
        if isinstance(id_generator, SharedSpanIdGenerator):
            id_generator = id_generator.delegate
        return not isinstance(id_generator, Random64BitIdGenerator)

    def tracer(
        self, name: str = DEFAULT_TRACER_NAME, version: str | None = None
    ) -> ScopedTracer:
        id_generator = self.tracer_provider.id_generator
        return ScopedTracer(
            self.tracer_provider.get_tracer(name, version),
            current_trace_context=self.current_trace_context,
            clock=self.clock,
            supports_join=self.supports_join,
            id_generator=(
                id_generator if isinstance(id_generator, SharedSpanIdGenerator) else None
            ),
        )

    def current_span(self) -> Span:
        return get_current_span(self.current_trace_context.get_current())

    def close(self) -> None:
        """Releases this instance from its registry and flushes pending spans"""
        with log_context(
            _logger, logging.DEBUG, "closing tracing of %s", self.service_name
        ):
            if self.registry is not None:
                self.registry.release(self)
            self.tracer_provider.shutdown()
