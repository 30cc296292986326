from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable, TypeVar

from .errors import ConfigurationError
from .models import BlockchainEvent, Lifecycle

E = TypeVar("E", bound=BlockchainEvent)


def _correlation_key(ev: BlockchainEvent) -> str:
    return ev.correlation_key  # type: ignore[attr-defined]


def aggregate_lifecycles(
    initiating: Iterable[BlockchainEvent],
    concluding: Iterable[BlockchainEvent],
    *,
    key: Callable[[BlockchainEvent], str] = _correlation_key,
    synthesize: Callable[[E], BlockchainEvent] | None = None,
    limit: int | None = None,
) -> list[Lifecycle]:
    """
    Join two independently queried event streams into one Lifecycle per key.

    - every initiating event opens a pending lifecycle; a repeated key
      replaces the earlier one (last write wins)
    - a concluding event closes the lifecycle with the same key; a lifecycle
      that is already concluded keeps its first conclusion
    - a concluding event with no initiating event yields a lifecycle that is
      concluded immediately; its initiating side is `synthesize(ev)`, or the
      concluding event itself when no synthesizer is given
    - output is ordered by the initiating event's block, newest first (ties
      keep insertion order), then truncated to `limit`

    Pure function of its inputs: identical inputs give identical output.
    """
    by_key: dict[str, Lifecycle] = {}

    for ev in initiating:
        k = key(ev)
        by_key[k] = Lifecycle(correlation_key=k, initiating=ev)

    for ev in concluding:
        k = key(ev)
        existing = by_key.get(k)
        if existing is None:
            opener = synthesize(ev) if synthesize is not None else ev
            by_key[k] = Lifecycle(correlation_key=k, initiating=opener, concluding=ev)
        elif existing.concluding is None:
            by_key[k] = replace(existing, concluding=ev)

    out = sorted(by_key.values(), key=lambda lc: lc.initiating.block_number, reverse=True)
    if limit is not None:
        if limit < 0:
            raise ConfigurationError(f"limit must be >= 0, got {limit}")
        out = out[:limit]
    return out


def pending(lifecycles: Iterable[Lifecycle]) -> list[Lifecycle]:
    return [lc for lc in lifecycles if lc.status == "pending"]


def concluded(lifecycles: Iterable[Lifecycle]) -> list[Lifecycle]:
    return [lc for lc in lifecycles if lc.status == "concluded"]
