"""Tokenizer and typed argument wrapper for console input lines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence, Tuple, Type, TypeVar

E = TypeVar("E", bound=Enum)

GROUP_MARKERS: Dict[str, str] = {
    "'": "'",
    '"': '"',
    "<": ">",
    "[": "]",
}

TRUE_STRINGS = ("true", "yes", "y", "on")
FALSE_STRINGS = ("false", "no", "n", "off")


class ErrorReporter(Protocol):
    def issue_error(self, message: str) -> None:
        ...


class EnumLookupError(ValueError):
    """Raised when an argument does not name a member of the requested enum."""


@dataclass(frozen=True)
class CommandArg:
    """A single token with lazy conversions.

    Conversions never touch ``raw``. A failed int, float or bool conversion
    reports through ``reporter`` and yields a zero value; a failed enum
    conversion reports and then raises :class:`EnumLookupError`.
    """

    raw: str
    reporter: Optional[ErrorReporter] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.raw

    # ------------------------------------------------------------------
    @property
    def int_value(self) -> int:
        try:
            return int(self.raw)
        except ValueError:
            self._type_error("int")
            return 0

    @property
    def float_value(self) -> float:
        try:
            return float(self.raw)
        except ValueError:
            self._type_error("float")
            return 0.0

    @property
    def bool_value(self) -> bool:
        try:
            return float(self.raw) != 0
        except ValueError:
            pass
        lowered = self.raw.lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        self._type_error("bool")
        return False

    def enum_value(self, enum_type: Type[E]) -> E:
        """Return the member of *enum_type* whose name matches, ignoring case."""

        wanted = self.raw.upper()
        for name, member in enum_type.__members__.items():
            if name.upper() == wanted:
                return member
        self._type_error(enum_type.__name__)
        raise EnumLookupError(f"value {self.raw} not found in enumerated type {enum_type.__name__}")

    # ------------------------------------------------------------------
    def _type_error(self, expected: str) -> None:
        if self.reporter is not None:
            self.reporter.issue_error(f"Incorrect type for {self.raw}, expected {expected}")


def _eat_argument(remaining: str) -> Tuple[str, str]:
    closer = GROUP_MARKERS.get(remaining[0])
    if closer is not None:
        end = remaining.find(closer, 1)
        if end >= 0:
            return remaining[1:end], remaining[end + 1 :]
    else:
        end = remaining.find(" ")
        if end >= 0:
            return remaining[:end], remaining[end + 1 :]
    return remaining, ""


def tokenize(line: str, reporter: Optional[ErrorReporter] = None) -> List[CommandArg]:
    """Split *line* into arguments, honouring quote and bracket groups.

    An unmatched opener makes the rest of the line a single token, opener
    included. Empty tokens are dropped.
    """

    tokens: List[CommandArg] = []
    remaining = line
    while remaining:
        text, remaining = _eat_argument(remaining)
        if text:
            tokens.append(CommandArg(text, reporter))
    return tokens


def join_arguments(args: Sequence[CommandArg], start: int = 0) -> str:
    return " ".join(arg.raw for arg in args[start:])


__all__ = [
    "CommandArg",
    "EnumLookupError",
    "ErrorReporter",
    "GROUP_MARKERS",
    "join_arguments",
    "tokenize",
]
