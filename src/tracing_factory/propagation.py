from collections.abc import Iterable
from typing import Final

from opentelemetry import baggage
from opentelemetry.context.context import Context
from opentelemetry.propagators.b3 import B3MultiFormat
from opentelemetry.propagators.textmap import (
    CarrierT,
    Getter,
    Setter,
    TextMapPropagator,
    default_getter,
    default_setter,
)
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from .basic_types import PropagationFactory
from .errors import InvalidFieldNameError

B3_FACTORY: Final[PropagationFactory] = B3MultiFormat
W3C_FACTORY: Final[PropagationFactory] = TraceContextTextMapPropagator


def _normalize_field_names(field_names: Iterable[str]) -> frozenset[str]:
    normalized = set()
    for name in field_names:
        if not isinstance(name, str):
            raise InvalidFieldNameError(name=name, reason="must be a string")
        if not (key := name.strip().lower()):
            raise InvalidFieldNameError(name=name, reason="must not be empty")
        normalized.add(key)
    if not normalized:
        raise InvalidFieldNameError(name="", reason="at least one field is required")
    return frozenset(normalized)


class ExtraFieldPropagation(TextMapPropagator):
    """Propagates a fixed set of extra headers next to the trace identifiers

    Extra values travel in-process as baggage entries named after their header
    (lower-case), e.g. 'x-vcap-request-id'.
    """

    def __init__(
        self, delegate: TextMapPropagator, field_names: Iterable[str]
    ) -> None:
        self.delegate = delegate
        self.extra_field_names: frozenset[str] = _normalize_field_names(field_names)

    @classmethod
    def new_factory(
        cls, delegate_factory: PropagationFactory, field_names: Iterable[str]
    ) -> PropagationFactory:
        names = _normalize_field_names(field_names)

        def _factory() -> "ExtraFieldPropagation":
            return cls(delegate_factory(), names)

        return _factory

    @staticmethod
    def get_field(context: Context | None, name: str) -> str | None:
        value = baggage.get_baggage(name.lower(), context)
        return None if value is None else f"{value}"

    @staticmethod
    def set_field(context: Context | None, name: str, value: str) -> Context:
        return baggage.set_baggage(name.lower(), value, context)

    def extract(
        self,
        carrier: CarrierT,
        context: Context | None = None,
        getter: Getter[CarrierT] = default_getter,
    ) -> Context:
        context = self.delegate.extract(carrier, context=context, getter=getter)
        for name in self.extra_field_names:
            values = getter.get(carrier, name)
            if values:
                context = baggage.set_baggage(name, values[0], context)
        return context

    def inject(
        self,
        carrier: CarrierT,
        context: Context | None = None,
        setter: Setter[CarrierT] = default_setter,
    ) -> None:
        self.delegate.inject(carrier, context=context, setter=setter)
        for name in self.extra_field_names:
            if (value := self.get_field(context, name)) is not None:
                setter.set(carrier, name, value)

    @property
    def fields(self) -> set[str]:
        return set(self.delegate.fields) | set(self.extra_field_names)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(delegate={self.delegate!r}, extra_field_names={sorted(self.extra_field_names)})"
