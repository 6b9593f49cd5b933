import random
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from opentelemetry import trace
from opentelemetry.sdk.trace.id_generator import IdGenerator, RandomIdGenerator


class Random64BitIdGenerator(RandomIdGenerator):
    """Trace ids only use the lower 64 bits (upper half is zero)"""

    def generate_trace_id(self) -> int:
        trace_id = random.getrandbits(64)
        while trace_id == trace.INVALID_TRACE_ID:
            trace_id = random.getrandbits(64)
        return trace_id


class SharedSpanIdGenerator(IdGenerator):
    """Hands out caller-provided ids while inside `sharing`

    Everything else is generated by the wrapped generator.
    """

    def __init__(self, delegate: IdGenerator) -> None:
        self.delegate = delegate
        self._shared_span_id: ContextVar[int | None] = ContextVar(
            f"shared_span_id_{id(self)}", default=None
        )
        self._shared_trace_id: ContextVar[int | None] = ContextVar(
            f"shared_trace_id_{id(self)}", default=None
        )

    @contextmanager
    def sharing(self, span_id: int, trace_id: int | None = None) -> Iterator[None]:
        span_token = self._shared_span_id.set(span_id)
        trace_token = self._shared_trace_id.set(trace_id)
        try:
            yield
        finally:
            self._shared_trace_id.reset(trace_token)
            self._shared_span_id.reset(span_token)

    def generate_span_id(self) -> int:
        if (shared := self._shared_span_id.get()) is not None:
            return shared
        return self.delegate.generate_span_id()

    def generate_trace_id(self) -> int:
        if (shared := self._shared_trace_id.get()) is not None:
            return shared
        return self.delegate.generate_trace_id()
