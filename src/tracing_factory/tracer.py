import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any, Final

from opentelemetry import trace
from opentelemetry.context.context import Context
from opentelemetry.trace import Link, SpanKind, Status, StatusCode
from opentelemetry.util import types

from .basic_types import Clock
from .context import CurrentTraceContext
from .ids import SharedSpanIdGenerator

_logger = logging.getLogger(__name__)

DEFAULT_TRACER_NAME: Final[str] = "tracing_factory"


class _ClockedSpan(trace.Span):
    """Span whose timestamps default to a configured clock instead of wall time"""

    def __init__(self, span: trace.Span, clock: Clock) -> None:
        self._span = span
        self._clock = clock

    def __getattr__(self, name: str) -> Any:
        # e.g. name, parent, start_time of SDK spans
        if name in ("_span", "_clock"):
            raise AttributeError(name)
        return getattr(self._span, name)

    def end(self, end_time: int | None = None) -> None:
        self._span.end(end_time=self._clock() if end_time is None else end_time)

    def get_span_context(self) -> trace.SpanContext:
        return self._span.get_span_context()

    def set_attributes(self, attributes: types.Attributes) -> None:
        self._span.set_attributes(attributes)

    def set_attribute(self, key: str, value: types.AttributeValue) -> None:
        self._span.set_attribute(key, value)

    def add_event(
        self,
        name: str,
        attributes: types.Attributes = None,
        timestamp: int | None = None,
    ) -> None:
        self._span.add_event(
            name,
            attributes=attributes,
            timestamp=self._clock() if timestamp is None else timestamp,
        )

    def add_link(
        self,
        context: trace.SpanContext,
        attributes: types.Attributes = None,
    ) -> None:
        self._span.add_link(context, attributes=attributes)

    def update_name(self, name: str) -> None:
        self._span.update_name(name)

    def is_recording(self) -> bool:
        return self._span.is_recording()

    def set_status(
        self, status: Status | StatusCode, description: str | None = None
    ) -> None:
        self._span.set_status(status, description)

    def record_exception(
        self,
        exception: BaseException,
        attributes: types.Attributes = None,
        timestamp: int | None = None,
        escaped: bool = False,  # noqa: FBT001, FBT002
    ) -> None:
        self._span.record_exception(
            exception,
            attributes=attributes,
            timestamp=self._clock() if timestamp is None else timestamp,
            escaped=escaped,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._span!r})"


class ScopedTracer(trace.Tracer):
    """Tracer applying the settings the SDK tracer cannot take by itself

    - spans are parented and activated through the configured current-trace-context
    - timestamps come from the configured clock (if any)
    - remote spans can be joined, i.e. continued with the same span id
    """

    def __init__(
        self,
        delegate: trace.Tracer,
        *,
        current_trace_context: CurrentTraceContext,
        clock: Clock | None = None,
        supports_join: bool = False,
        id_generator: SharedSpanIdGenerator | None = None,
    ) -> None:
        self.delegate = delegate
        self.current_trace_context = current_trace_context
        self.clock = clock
        self.supports_join = supports_join
        self._id_generator = id_generator

    def start_span(  # pylint: disable=too-many-arguments
        self,
        name: str,
        context: Context | None = None,
        kind: SpanKind = SpanKind.INTERNAL,
        attributes: types.Attributes = None,
        links: Sequence[Link] | None = None,
        start_time: int | None = None,
        record_exception: bool = True,  # noqa: FBT001, FBT002
        set_status_on_exception: bool = True,  # noqa: FBT001, FBT002
    ) -> trace.Span:
        if context is None:
            context = self.current_trace_context.get_current()
        if start_time is None and self.clock is not None:
            start_time = self.clock()

        span = self.delegate.start_span(
            name,
            context=context,
            kind=kind,
            attributes=attributes,
            links=links,
            start_time=start_time,
            record_exception=record_exception,
            set_status_on_exception=set_status_on_exception,
        )
        if self.clock is not None:
            return _ClockedSpan(span, self.clock)
        return span

    @contextmanager
    def start_as_current_span(  # pylint: disable=too-many-arguments
        self,
        name: str,
        context: Context | None = None,
        kind: SpanKind = SpanKind.INTERNAL,
        attributes: types.Attributes = None,
        links: Sequence[Link] | None = None,
        start_time: int | None = None,
        record_exception: bool = True,  # noqa: FBT001, FBT002
        set_status_on_exception: bool = True,  # noqa: FBT001, FBT002
        end_on_exit: bool = True,  # noqa: FBT001, FBT002
    ) -> Iterator[trace.Span]:
        span = self.start_span(
            name,
            context=context,
            kind=kind,
            attributes=attributes,
            links=links,
            start_time=start_time,
            record_exception=record_exception,
            set_status_on_exception=set_status_on_exception,
        )
        with self.use_span(
            span,
            end_on_exit=end_on_exit,
            record_exception=record_exception,
            set_status_on_exception=set_status_on_exception,
        ) as current:
            yield current

    @contextmanager
    def use_span(
        self,
        span: trace.Span,
        *,
        end_on_exit: bool = False,
        record_exception: bool = True,
        set_status_on_exception: bool = True,
    ) -> Iterator[trace.Span]:
        """Makes `span` the current one in this tracer's current-trace-context"""
        token = self.current_trace_context.attach(
            trace.set_span_in_context(span, self.current_trace_context.get_current())
        )
        try:
            yield span

        except Exception as exc:
            if span.is_recording():
                if record_exception:
                    span.record_exception(exc)
                if set_status_on_exception:
                    span.set_status(
                        Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}")
                    )
            raise

        finally:
            self.current_trace_context.detach(token)
            if end_on_exit:
                span.end()

    def join_span(
        self,
        name: str,
        context: Context,
        *,
        kind: SpanKind = SpanKind.SERVER,
        attributes: types.Attributes = None,
    ) -> trace.Span:
        """Continues the remote span found in an extracted `context`

        With join support the new span shares the remote trace and span ids (both
        sides report the same span) and has no parent, otherwise it is a child of
        the remote span.
        """
        remote = trace.get_current_span(context).get_span_context()
        if not (
            self.supports_join
            and self._id_generator is not None
            and remote.is_valid
            and remote.is_remote
        ):
            return self.start_span(
                name, context=context, kind=kind, attributes=attributes
            )

        _logger.debug("Joining remote span %016x", remote.span_id)
        if not remote.trace_flags.sampled:
            # the caller decided not to sample: nothing is recorded on this side either
            return trace.NonRecordingSpan(
                trace.SpanContext(
                    trace_id=remote.trace_id,
                    span_id=remote.span_id,
                    is_remote=False,
                    trace_flags=remote.trace_flags,
                    trace_state=remote.trace_state,
                )
            )
        with self._id_generator.sharing(remote.span_id, trace_id=remote.trace_id):
            # NOTE: the remote span is not a parent, it is this very span
            return self.start_span(
                name,
                context=trace.set_span_in_context(trace.INVALID_SPAN, context),
                kind=kind,
                attributes=attributes,
            )
