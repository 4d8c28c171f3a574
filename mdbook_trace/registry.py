from __future__ import annotations

import logging
from typing import Iterable, Iterator

from .config import TargetConfig
from .errors import (
    DuplicateTargetConfigurationError,
    RegistryFrozenError,
    UnknownTargetError,
)
from .types import Trace, TraceTarget

LOGGER = logging.getLogger(__name__)


class TraceRegistry:
    """Append-only store of traces grouped by target and record.

    Targets are fixed at construction. Records keep first-seen order, and
    every record keeps its traces in discovery order.
    """

    def __init__(self, targets: Iterable[TargetConfig]) -> None:
        self._targets: dict[str, TraceTarget] = {}
        for target in targets:
            if target.id in self._targets:
                raise DuplicateTargetConfigurationError(target.id)
            self._targets[target.id] = TraceTarget(id=target.id, name=target.name)
        self._frozen = False

    def __contains__(self, target: object) -> bool:
        return target in self._targets

    def __iter__(self) -> Iterator[TraceTarget]:
        return iter(self._targets.values())

    @property
    def frozen(self) -> bool:
        return self._frozen

    def target(self, target: str) -> TraceTarget:
        try:
            return self._targets[target]
        except KeyError:
            raise UnknownTargetError(target) from None

    def record_trace(self, target: str, record: str, trace: Trace) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                f"cannot record trace {trace.label} after registration has finished"
            )
        self.target(target).add(record, trace)
        LOGGER.debug("recorded trace %s -> %s:%s", trace.label, target, record)

    def traces_for(self, target: str) -> list[tuple[str, tuple[Trace, ...]]]:
        return [
            (record, tuple(traces))
            for record, traces in self.target(target).records.items()
        ]

    def freeze(self) -> None:
        self._frozen = True
