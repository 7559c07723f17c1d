"""Line dispatcher: tokenizes input, validates arity and invokes handlers."""

from __future__ import annotations

import logging
import traceback
from typing import Any, List, Optional, Union

from devconsole.arguments import CommandArg, tokenize
from devconsole.log_buffer import LogBuffer, LogKind
from devconsole.registry import CommandRegistry, CommandSpec, VariableKind, VariableSpec

logger = logging.getLogger("devconsole.shell")


class VariableLookupError(LookupError):
    """Raised when a variable name is not registered."""


class MissingHandlerError(RuntimeError):
    """Raised when a registered command never received an implementation."""


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


class CommandShell:
    """Parses console lines and dispatches them to registered commands.

    Handlers are called as ``handler(context, args)``; *context* defaults to
    the shell itself. Errors are kept in a single shell-wide slot that is
    cleared at the start of every :meth:`run`; the last error wins.
    """

    def __init__(self, log_buffer: Optional[LogBuffer] = None, context: Any = None) -> None:
        self.log_buffer = log_buffer
        self.context = self if context is None else context
        self.registry = CommandRegistry(on_error=self.issue_error)
        self.last_traceback: Optional[str] = None
        self._error: Optional[str] = None
        self._errors: List[str] = []
        self._errors_issued = 0

    # -------------------- error state --------------------------
    @property
    def issued_error(self) -> bool:
        return self._error is not None

    @property
    def issued_error_message(self) -> Optional[str]:
        return self._error

    @property
    def issued_errors(self) -> List[str]:
        """Every error issued since the last clear, oldest first."""

        return list(self._errors)

    def issue_error(self, message: str) -> None:
        self._error = message
        self._errors.append(message)
        self._errors_issued += 1

    def clear_error(self) -> None:
        self._error = None
        self._errors.clear()
        self.last_traceback = None

    # -------------------- execution ----------------------------
    def tokenize(self, line: str) -> List[CommandArg]:
        return tokenize(line, self)

    def run(self, line: str) -> None:
        if self.log_buffer is not None:
            self.log_buffer.append(line, LogKind.INPUT)
        self.clear_error()

        arguments = self.tokenize(line)
        if not arguments:
            return

        name = arguments[0].raw.upper()
        command = self.registry.get(name)
        if command is None:
            self.issue_error(f"Command {name} could not be found")
            return
        self._invoke(command, arguments[1:])

    def _invoke(self, command: CommandSpec, args: List[CommandArg]) -> None:
        arity_error = self._arity_error(command, len(args))
        if arity_error is not None:
            self.issue_error(arity_error)
            self._append_usage(command)
            return

        try:
            if command.handler is None:
                raise MissingHandlerError(f"Command {command.name} has no implementation")
            command.handler(self.context, args)
        except Exception as exc:
            logger.debug("Command %s failed", command.name, exc_info=True)
            self.last_traceback = traceback.format_exc()
            self.issue_error(str(exc) or type(exc).__name__)

        if self._error is not None:
            self._append_usage(command)

    @staticmethod
    def _arity_error(command: CommandSpec, count: int) -> Optional[str]:
        if count < command.min_args:
            qualifier = "exactly" if command.min_args == command.max_args else "at least"
            required = command.min_args
        elif command.max_args > -1 and count > command.max_args:
            qualifier = "exactly" if command.min_args == command.max_args else "at most"
            required = command.max_args
        else:
            return None
        return f"{command.name} requires {qualifier} {required} argument{_plural(required)}"

    def _append_usage(self, command: CommandSpec) -> None:
        if command.usage is not None and self._error is not None:
            self._error += f"\n    -> Usage: {command.usage}"

    # -------------------- variables ----------------------------
    def _variable(self, name: str) -> VariableSpec:
        spec = self.registry.get_variable(name)
        if spec is None:
            raise VariableLookupError(f"no variable registered with name {name.upper()}")
        return spec

    def set_variable(self, name: str, value: Union[str, CommandArg]) -> Any:
        """Convert *value* to the variable's kind and pass it to the setter.

        Returns the converted value, or ``None`` when the conversion
        reported a type error, in which case the setter is not called.
        """

        spec = self._variable(name)
        raw = value.raw if isinstance(value, CommandArg) else str(value)
        arg = CommandArg(raw, self)
        issued_before = self._errors_issued
        if spec.kind is VariableKind.STRING:
            converted: Any = arg.raw
        elif spec.kind is VariableKind.INT:
            converted = arg.int_value
        elif spec.kind is VariableKind.FLOAT:
            converted = arg.float_value
        elif spec.kind is VariableKind.BOOL:
            converted = arg.bool_value
        else:
            converted = arg.enum_value(spec.enum_type)
        if self._errors_issued != issued_before:
            return None
        spec.set(converted)
        return converted

    def get_variable(self, name: str) -> Any:
        return self._variable(name).get()


__all__ = ["CommandShell", "MissingHandlerError", "VariableLookupError"]
