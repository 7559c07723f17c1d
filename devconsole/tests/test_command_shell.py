from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List

import pytest

from devconsole.arguments import CommandArg, EnumLookupError
from devconsole.command_shell import CommandShell, VariableLookupError
from devconsole.log_buffer import LogBuffer, LogKind
from devconsole.registry import CommandDescriptor, front_command, variable


class Difficulty(Enum):
    EASY = 1
    HARD = 2


def _shell_with(*descriptors: CommandDescriptor) -> CommandShell:
    shell = CommandShell(LogBuffer(32))
    shell.registry.register(descriptors)
    return shell


def _recording_command(calls: List[List[str]], **kwargs: Any) -> CommandDescriptor:
    def handler(context: Any, args: List[CommandArg]) -> None:
        calls.append([arg.raw for arg in args])

    return CommandDescriptor(handler=handler, **kwargs)


def test_empty_line_is_a_no_op() -> None:
    calls: List[List[str]] = []
    shell = _shell_with(_recording_command(calls, name="noop"))
    shell.run("")
    assert not shell.issued_error
    assert calls == []


def test_run_echoes_input_to_log_buffer() -> None:
    shell = _shell_with()
    shell.run("whatever")
    entry = shell.log_buffer.entries[0]
    assert entry.message == "whatever"
    assert entry.kind is LogKind.INPUT


def test_unknown_command_sets_error() -> None:
    shell = _shell_with()
    shell.run("nope 1 2")
    assert shell.issued_error_message == "Command NOPE could not be found"


def test_error_state_is_cleared_by_next_run() -> None:
    calls: List[List[str]] = []
    shell = _shell_with(_recording_command(calls, name="ok"))
    shell.run("nope")
    assert shell.issued_error
    shell.run("ok")
    assert not shell.issued_error


@pytest.mark.parametrize("line", ["pair a", "pair a b c"])
def test_exact_arity_rejects_wrong_counts(line: str) -> None:
    calls: List[List[str]] = []
    shell = _shell_with(_recording_command(calls, name="pair", min_args=2, max_args=2))
    shell.run(line)
    assert shell.issued_error_message == "PAIR requires exactly 2 arguments"
    assert calls == []


def test_exact_arity_invokes_handler() -> None:
    calls: List[List[str]] = []
    shell = _shell_with(_recording_command(calls, name="pair", min_args=2, max_args=2))
    shell.run('PAIR a "b c"')
    assert not shell.issued_error
    assert calls == [["a", "b c"]]


def test_arity_messages_use_singular_and_bounds() -> None:
    calls: List[List[str]] = []
    shell = _shell_with(
        _recording_command(calls, name="need", min_args=1),
        _recording_command(calls, name="most", max_args=1),
    )
    shell.run("need")
    assert shell.issued_error_message == "NEED requires at least 1 argument"
    shell.run("most a b")
    assert shell.issued_error_message == "MOST requires at most 1 argument"
    assert calls == []


def test_usage_is_appended_to_errors() -> None:
    calls: List[List[str]] = []
    shell = _shell_with(
        _recording_command(calls, name="pair", min_args=2, max_args=2, usage="pair <a> <b>")
    )
    shell.run("pair")
    assert shell.issued_error_message == "PAIR requires exactly 2 arguments\n    -> Usage: pair <a> <b>"


def test_handler_failures_are_caught() -> None:
    def explode(context: Any, args: List[CommandArg]) -> None:
        raise ValueError("kaboom")

    shell = _shell_with(CommandDescriptor(handler=explode, name="explode", usage="explode"))
    shell.run("explode")
    assert shell.issued_error_message == "kaboom\n    -> Usage: explode"
    assert "ValueError" in shell.last_traceback


def test_handler_failure_without_message_uses_type_name() -> None:
    def explode(context: Any, args: List[CommandArg]) -> None:
        raise RuntimeError()

    shell = _shell_with(CommandDescriptor(handler=explode, name="explode"))
    shell.run("explode")
    assert shell.issued_error_message == "RuntimeError"


def test_conversion_errors_reach_the_shell() -> None:
    seen: List[int] = []

    def count(context: Any, args: List[CommandArg]) -> None:
        seen.append(args[0].int_value)

    shell = _shell_with(CommandDescriptor(handler=count, name="count", min_args=1, max_args=1))
    shell.run("count abc")
    assert seen == [0]
    assert shell.issued_error_message == "Incorrect type for abc, expected int"


def test_handler_receives_context() -> None:
    received: List[Any] = []

    def grab(context: Any, args: List[CommandArg]) -> None:
        received.append(context)

    shell = _shell_with(CommandDescriptor(handler=grab, name="grab"))
    shell.run("grab")
    assert received == [shell]

    marker = object()
    other = CommandShell(context=marker)
    other.registry.register([CommandDescriptor(handler=grab, name="grab")])
    other.run("grab")
    assert received[-1] is marker


def test_placeholder_without_implementation_fails_at_dispatch() -> None:
    @front_command(name="ghost")
    def front_ghost(target: str) -> None:
        pass

    shell = _shell_with(front_ghost.__command_definition__)
    assert shell.issued_error_message == "GHOST is missing an implementation."

    shell.run("ghost")
    assert shell.issued_error_message == "GHOST requires exactly 1 argument"
    shell.run("ghost me")
    assert shell.issued_error_message == "Command GHOST has no implementation"


def test_nested_runs_share_error_state() -> None:
    calls: List[List[str]] = []

    def outer(context: Any, args: List[CommandArg]) -> None:
        context.run(" ".join(arg.raw for arg in args))

    shell = _shell_with(
        CommandDescriptor(handler=outer, name="outer", usage="outer <line>"),
        _recording_command(calls, name="inner", max_args=0),
    )
    shell.run("outer inner")
    assert calls == [[]]
    assert not shell.issued_error

    shell.run("outer inner extra")
    assert shell.issued_error_message == "INNER requires exactly 0 arguments\n    -> Usage: outer <line>"


def test_variable_round_trip() -> None:
    state: Dict[str, Any] = {"scale": 1.0}
    shell = CommandShell()
    shell.registry.register(
        variables=[variable("TimeScale", float, lambda: state["scale"], lambda v: state.__setitem__("scale", v))]
    )

    assert shell.set_variable("TimeScale", "2.5") == 2.5
    value = shell.get_variable("timescale")
    assert value == 2.5
    assert isinstance(value, float)


def test_variable_conversion_failure_skips_setter() -> None:
    state: Dict[str, Any] = {"lives": 3}
    shell = CommandShell()
    shell.registry.register(
        variables=[variable("Lives", int, lambda: state["lives"], lambda v: state.__setitem__("lives", v))]
    )

    assert shell.set_variable("lives", CommandArg("many")) is None
    assert state["lives"] == 3
    assert shell.issued_error_message == "Incorrect type for many, expected int"


def test_enum_and_bool_variables() -> None:
    state: Dict[str, Any] = {"mode": Difficulty.EASY, "god": False}
    shell = CommandShell()
    shell.registry.register(
        variables=[
            variable("Mode", Difficulty, lambda: state["mode"], lambda v: state.__setitem__("mode", v)),
            variable("God", bool, lambda: state["god"], lambda v: state.__setitem__("god", v)),
            variable("Name", str, lambda: "", lambda v: state.__setitem__("name", v)),
        ]
    )

    shell.set_variable("mode", "hard")
    shell.set_variable("god", "yes")
    shell.set_variable("name", "player one")
    assert state == {"mode": Difficulty.HARD, "god": True, "name": "player one"}

    with pytest.raises(EnumLookupError):
        shell.set_variable("mode", "nightmare")
    assert state["mode"] is Difficulty.HARD


def test_unknown_variable_raises() -> None:
    shell = CommandShell()
    with pytest.raises(VariableLookupError) as excinfo:
        shell.set_variable("missing", "1")
    assert str(excinfo.value) == "no variable registered with name MISSING"
    with pytest.raises(VariableLookupError):
        shell.get_variable("missing")
