"""Strategies tracking which span is active across nested calls

Both follow the OpenTelemetry runtime-context interface (attach, detach, get_current)
so the SDK context objects and tokens are used unchanged.
"""

from contextvars import ContextVar, Token

from opentelemetry import context as otcontext
from opentelemetry.context.context import Context, _RuntimeContext
from opentelemetry.context.contextvars_context import ContextVarsRuntimeContext

from .errors import ScopeMisuseError

# NOTE: the SDK has no public name for this interface
CurrentTraceContext = _RuntimeContext


class GlobalCurrentTraceContext(_RuntimeContext):
    """Uses the process-wide OpenTelemetry context, i.e. what trace.get_current_span() sees"""

    def attach(self, context: Context) -> Token[Context]:
        return otcontext.attach(context)

    def get_current(self) -> Context:
        return otcontext.get_current()

    def detach(self, token: Token[Context]) -> None:
        otcontext.detach(token)


class StrictCurrentTraceContext(ContextVarsRuntimeContext):
    """Keeps its own context and refuses to close scopes out of order

    Useful in tests to catch spans left open or closed by the wrong caller.
    """

    def __init__(self) -> None:
        super().__init__()
        self._scopes: ContextVar[tuple[Token[Context], ...]] = ContextVar(
            f"strict_scopes_{id(self)}", default=()
        )

    def attach(self, context: Context) -> Token[Context]:
        token = super().attach(context)
        self._scopes.set((*self._scopes.get(), token))
        return token

    def detach(self, token: Token[Context]) -> None:
        scopes = self._scopes.get()
        if not scopes or scopes[-1] is not token:
            raise ScopeMisuseError(open_scopes=len(scopes))
        self._scopes.set(scopes[:-1])
        super().detach(token)

    @property
    def open_scopes(self) -> int:
        return len(self._scopes.get())
