"""Exception hierarchy for trace preprocessing runs."""

from __future__ import annotations


class TraceError(RuntimeError):
    """Base class for every failure that aborts a run."""


class ConfigurationError(TraceError):
    """Raised when the preprocessor configuration is invalid."""


class DuplicateTargetConfigurationError(ConfigurationError):
    """Raised when a target id is declared more than once."""

    def __init__(self, target: str) -> None:
        super().__init__(f"target '{target}' is declared more than once")
        self.target = target


class ProtocolError(TraceError):
    """Raised when the host payload cannot be understood."""


class RegistryFrozenError(TraceError):
    """Raised when a trace is recorded after pass 1 has finished."""


class MarkerError(TraceError):
    def __init__(
        self, message: str, *, chapter: str = "", marker: str = "", line: int = 0
    ) -> None:
        self.reason = message
        self.chapter = chapter
        self.marker = marker
        self.line = line
        super().__init__(self._describe())

    def _describe(self) -> str:
        parts = [self.reason]
        if self.chapter:
            location = f"in chapter '{self.chapter}'"
            if self.line:
                location += f" line {self.line}"
            parts.append(location)
        if self.marker:
            parts.append(f"at `{self.marker}`")
        return " ".join(parts)

    def located(self, chapter: str) -> MarkerError:
        if not self.chapter:
            self.chapter = chapter
            self.args = (self._describe(),)
        return self


class UnknownTargetError(MarkerError):
    """Raised when a marker names a target missing from the configuration."""

    def __init__(
        self, target: str, *, chapter: str = "", marker: str = "", line: int = 0
    ) -> None:
        self.target = target
        super().__init__(
            f"no target defined with id '{target}'",
            chapter=chapter,
            marker=marker,
            line=line,
        )


class MalformedMarkerError(MarkerError):
    """Raised when marker syntax is present but incomplete."""
