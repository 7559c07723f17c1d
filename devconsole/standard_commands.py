"""Commands and variables every console session ships with."""

from __future__ import annotations

import sys
import time
from typing import TYPE_CHECKING, List

from devconsole.arguments import CommandArg, join_arguments
from devconsole.log_buffer import LogKind
from devconsole.registry import CommandDescriptor, VariableDescriptor, collect_commands, command, variable

if TYPE_CHECKING:  # pragma: no cover - typing only
    from devconsole.terminal import Terminal

SCHEDULE_USAGE = "schedule [delay] [command] - delay is in seconds"
KEY_COMMANDS = {"BIND", "UNBIND"}


@command(name="Clear", help="Clear the command console", max_args=0)
def command_clear(terminal: "Terminal", args: List[CommandArg]) -> None:
    terminal.buffer.clear()


@command(name="Help", help="Display help information about a command", max_args=1)
def command_help(terminal: "Terminal", args: List[CommandArg]) -> None:
    registry = terminal.shell.registry
    if not args:
        for spec in registry.values():
            if not spec.hidden:
                terminal.log(f"{spec.name.ljust(16)}: {spec.help or ''}")
        return

    name = args[0].raw.upper()
    spec = registry.get(name)
    if spec is None:
        terminal.shell.issue_error(f"Command {name} could not be found.")
        return

    if spec.help is None:
        terminal.log(f"{name} does not provide any help documentation.")
    elif spec.usage is None:
        terminal.log(spec.help)
    else:
        terminal.log(f"{spec.help}\nUsage: {spec.usage}")


@command(name="Time", help="Measure the execution time of a command", min_args=1)
def command_time(terminal: "Terminal", args: List[CommandArg]) -> None:
    started = time.perf_counter()
    terminal.shell.run(join_arguments(args))
    elapsed_ms = (time.perf_counter() - started) * 1000
    terminal.log(f"Time: {elapsed_ms:.4f}ms")


def _schedule(terminal: "Terminal", args: List[CommandArg], scaled: bool) -> None:
    shell = terminal.shell
    delay = args[0].float_value
    if shell.issued_error:
        return
    terminal.schedule(delay, join_arguments(args, 1), scaled=scaled)


@command(
    name="Schedule",
    help="Schedule a command to be executed some time in the future",
    min_args=2,
    usage=SCHEDULE_USAGE,
)
def command_schedule(terminal: "Terminal", args: List[CommandArg]) -> None:
    _schedule(terminal, args, scaled=True)


@command(
    name="ScheduleUnscaled",
    help="Schedule a command ignoring the time scale",
    min_args=2,
    usage=SCHEDULE_USAGE,
)
def command_schedule_unscaled(terminal: "Terminal", args: List[CommandArg]) -> None:
    _schedule(terminal, args, scaled=False)


@command(name="Print", help="Output message")
def command_print(terminal: "Terminal", args: List[CommandArg]) -> None:
    terminal.log(join_arguments(args), LogKind.MESSAGE)


@command(name="Trace", help="Output the stack trace of the previous message", max_args=0)
def command_trace(terminal: "Terminal", args: List[CommandArg]) -> None:
    entries = terminal.buffer.entries
    # the last entry is the echo of this very command
    if len(entries) < 2:
        terminal.log("Nothing to trace.")
        return
    entry = entries[-2]
    if not entry.stack_trace:
        terminal.log(f"{entry.message} (no trace)")
    else:
        terminal.log(entry.stack_trace)


@command(name="Set", help="List all variables or set a variable value", usage="set [variable] [value]")
def command_set(terminal: "Terminal", args: List[CommandArg]) -> None:
    shell = terminal.shell
    if not args:
        for name in shell.registry.variable_names():
            terminal.log(f"{name.ljust(16)}: {shell.get_variable(name)}")
        return
    shell.set_variable(args[0].raw, join_arguments(args, 1))


@command(
    name="Bind",
    help="Bind a key to a command",
    min_args=2,
    usage="bind [key] [command]",
)
def command_bind(terminal: "Terminal", args: List[CommandArg]) -> None:
    key = args[0].enum_value(terminal.key_type)
    terminal.bindings.add(key, join_arguments(args, 1))


@command(
    name="Unbind",
    help="Remove all bindings from a key",
    min_args=1,
    max_args=1,
    usage="unbind [key]",
)
def command_unbind(terminal: "Terminal", args: List[CommandArg]) -> None:
    terminal.bindings.reset(args[0].enum_value(terminal.key_type))


@command(help="No operation")
def command_noop(terminal: "Terminal", args: List[CommandArg]) -> None:
    pass


def builtin_commands(terminal: "Terminal") -> List[CommandDescriptor]:
    descriptors = collect_commands(sys.modules[__name__])
    if terminal.key_type is None:
        descriptors = [d for d in descriptors if d.resolved_name().upper() not in KEY_COMMANDS]
    return descriptors


def builtin_variables(terminal: "Terminal") -> List[VariableDescriptor]:
    scheduler = terminal.scheduler

    def _set_handle_log(value: bool) -> None:
        terminal.capture_logs = value

    def _set_time_scale(value: float) -> None:
        scheduler.time_scale = value

    return [
        variable("HandleLog", bool, lambda: terminal.capture_logs, _set_handle_log),
        variable("TimeScale", float, lambda: scheduler.time_scale, _set_time_scale),
    ]


__all__ = ["builtin_commands", "builtin_variables"]
