from typing import Any


class _DefaultDict(dict):
    def __missing__(self, key):
        return f"'{key}=?'"


class TracingFactoryErrorMixin:
    msg_template: str

    def __init__(self, **ctx: Any) -> None:
        self.__dict__ = ctx
        super().__init__(self._build_message())

    def __str__(self) -> str:
        return self._build_message()

    def _build_message(self) -> str:
        # NOTE: safe. Does not raise KeyError
        return self.msg_template.format_map(_DefaultDict(**self.__dict__))

    def error_context(self) -> dict[str, Any]:
        """Returns context in which error occurred and stored within the exception"""
        return dict(**self.__dict__)


class BaseTracingFactoryError(TracingFactoryErrorMixin, Exception): ...


class ScopeMisuseError(BaseTracingFactoryError):
    msg_template = (
        "Scope closed out of order: {open_scopes} scope(s) open "
        "and the one being closed is not the innermost"
    )


class InvalidFieldNameError(BaseTracingFactoryError, ValueError):
    msg_template = "Invalid propagation field name {name!r}: {reason}"
