import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import TypeAlias

LogLevelInt: TypeAlias = int
LogMessageStr: TypeAlias = str


def _un_capitalize(s: str) -> str:
    return s[:1].lower() + s[1:] if s else ""


@contextmanager
def log_context(
    logger: logging.Logger,
    level: LogLevelInt,
    msg: LogMessageStr,
    *args,
    log_duration: bool = False,
) -> Iterator[None]:
    # NOTE: preserves original signature https://docs.python.org/3/library/logging.html#logging.Logger.log
    start = datetime.now()  # noqa: DTZ005
    msg = _un_capitalize(msg.strip())

    stacklevel = 3  # NOTE: 1 => log_context, 2 => contextlib, 3 => caller
    logger.log(level, f"Starting {msg} ...", *args, stacklevel=stacklevel)
    yield
    duration = (
        f" in {(datetime.now() - start).total_seconds()}s"  # noqa: DTZ005
        if log_duration
        else ""
    )
    logger.log(level, f"Finished {msg}{duration}", *args, stacklevel=stacklevel)
