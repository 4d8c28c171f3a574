from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Trace:
    target: str
    record: str
    chapter: str
    path: str | None
    number: tuple[int, ...]
    footnote: int

    @property
    def label(self) -> str:
        return ".".join(str(part) for part in self.number)

    @property
    def anchor_id(self) -> str:
        return "_".join(str(part) for part in self.number)

    @property
    def anchor(self) -> str:
        return f"trace{self.anchor_id}"

    @property
    def note(self) -> str:
        return f"note{self.anchor_id}"

    def footnote_label(self, qualified: bool) -> str:
        return self.label if qualified else str(self.footnote)


@dataclass
class TraceTarget:
    id: str
    name: str
    records: dict[str, list[Trace]] = field(default_factory=dict)

    def add(self, record: str, trace: Trace) -> None:
        self.records.setdefault(record, []).append(trace)

    @property
    def trace_count(self) -> int:
        return sum(len(traces) for traces in self.records.values())
