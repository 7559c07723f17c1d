from __future__ import annotations

from enum import Enum
from typing import List

import pytest

from devconsole.arguments import CommandArg, EnumLookupError, join_arguments, tokenize


class _Recorder:
    def __init__(self) -> None:
        self.errors: List[str] = []

    def issue_error(self, message: str) -> None:
        self.errors.append(message)


class Color(Enum):
    RED = 1
    GREEN = 2


def _raw(line: str) -> List[str]:
    return [token.raw for token in tokenize(line)]


def test_tokenize_empty_line_yields_no_tokens() -> None:
    assert tokenize("") == []


def test_tokenize_keeps_quoted_spaces() -> None:
    assert _raw('set foo "hello world"') == ["set", "foo", "hello world"]


def test_tokenize_strips_angle_brackets() -> None:
    assert _raw('bind <Space> "do thing"') == ["bind", "Space", "do thing"]


def test_tokenize_square_brackets_and_single_quotes() -> None:
    assert _raw("run [a b] 'c d'") == ["run", "a b", "c d"]


def test_tokenize_unmatched_opener_takes_rest_of_line() -> None:
    assert _raw('say "hello world') == ["say", '"hello world']


def test_tokenize_drops_empty_tokens() -> None:
    assert _raw("print   a  b ") == ["print", "a", "b"]
    assert _raw('print ""') == ["print"]


def test_int_conversion() -> None:
    recorder = _Recorder()
    assert CommandArg("42", recorder).int_value == 42
    assert CommandArg("-7", recorder).int_value == -7
    assert recorder.errors == []

    bad = CommandArg("abc", recorder)
    assert bad.int_value == 0
    assert recorder.errors == ["Incorrect type for abc, expected int"]
    assert bad.raw == "abc"


def test_float_conversion() -> None:
    recorder = _Recorder()
    assert CommandArg("2.5", recorder).float_value == 2.5
    assert CommandArg("x", recorder).float_value == 0.0
    assert recorder.errors == ["Incorrect type for x, expected float"]


@pytest.mark.parametrize(
    "raw, expected",
    [("yes", True), ("off", False), ("3", True), ("0", False), ("ON", True), ("n", False), ("0.5", True)],
)
def test_bool_conversion(raw: str, expected: bool) -> None:
    recorder = _Recorder()
    assert CommandArg(raw, recorder).bool_value is expected
    assert recorder.errors == []


def test_bool_conversion_reports_unknown_words() -> None:
    recorder = _Recorder()
    assert CommandArg("maybe", recorder).bool_value is False
    assert recorder.errors == ["Incorrect type for maybe, expected bool"]


def test_enum_conversion_ignores_case() -> None:
    assert CommandArg("green").enum_value(Color) is Color.GREEN


def test_enum_conversion_reports_and_raises() -> None:
    recorder = _Recorder()
    with pytest.raises(EnumLookupError):
        CommandArg("blue", recorder).enum_value(Color)
    assert recorder.errors == ["Incorrect type for blue, expected Color"]


def test_conversion_without_reporter_still_defaults() -> None:
    assert CommandArg("nope").int_value == 0


def test_join_arguments() -> None:
    args = tokenize("schedule 2 print hi")
    assert join_arguments(args) == "schedule 2 print hi"
    assert join_arguments(args, 2) == "print hi"
    assert join_arguments(args, 10) == ""
