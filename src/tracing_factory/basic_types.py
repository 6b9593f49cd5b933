from collections.abc import Callable
from typing import Annotated, Any, TypeAlias, TypeVar

from opentelemetry.propagators.textmap import TextMapPropagator
from pydantic import BeforeValidator, Field, ImportString

T = TypeVar("T")


def _instantiate_if_class(value: Any) -> Any:
    # a class given by reference stands for a default-constructed instance
    if isinstance(value, type):
        return value()
    return value


# port number range
PortInt: TypeAlias = Annotated[int, Field(gt=0, le=65535)]

# epoch time in nanoseconds, e.g. time.time_ns
Clock: TypeAlias = Callable[[], int]

PropagationFactory: TypeAlias = Callable[[], TextMapPropagator]

# An object, a class or a dotted import path to either.
# NOTE: before-validators run last-to-first, i.e. import, then instantiate, then type-check
Reference: TypeAlias = Annotated[
    T, BeforeValidator(_instantiate_if_class), ImportString()
]

# A callable or a dotted import path to it. Never instantiated.
CallableReference: TypeAlias = Annotated[T, ImportString()]
