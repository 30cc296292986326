import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Sequence

NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "hpack")


@contextmanager
def quiet_loggers(names: Sequence[str] = NOISY_LOGGERS, level: int = logging.WARNING) -> Iterator[None]:
    """Raise the level of the named loggers for the duration of the block, then restore it."""
    loggers = [logging.getLogger(n) for n in names]
    saved = [lg.level for lg in loggers]
    for lg in loggers:
        if lg.getEffectiveLevel() < level:
            lg.setLevel(level)
    try:
        yield
    finally:
        for lg, lvl in zip(loggers, saved):
            lg.setLevel(lvl)


def _now_ts_str() -> str:
    return datetime.now(timezone.utc).strftime("%Y_%m_%d_%H%M%S")
