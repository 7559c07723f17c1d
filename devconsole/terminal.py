"""Console session: owns the shell, transcript, history, completion and scheduler."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, List, Optional, Type

from devconsole.autocomplete import CommandAutocomplete, Completion
from devconsole.bindings import KeyBindings
from devconsole.command_shell import CommandShell
from devconsole.config import TerminalConfig
from devconsole.history import CommandHistory
from devconsole.log_buffer import ConsoleLogHandler, LogBuffer, LogEntry, LogKind
from devconsole.registry import CommandDescriptor, CommandSpec, VariableDescriptor
from devconsole.scheduler import CommandScheduler, ScheduledCommand
from devconsole.standard_commands import builtin_commands, builtin_variables

logger = logging.getLogger("devconsole.terminal")


class Terminal:
    """One developer console session.

    The terminal is the context object handed to every command handler, so
    handlers reach the transcript, scheduler and bindings through it rather
    than through module globals.
    """

    def __init__(
        self,
        config: Optional[TerminalConfig] = None,
        *,
        commands: Iterable[CommandDescriptor] = (),
        variables: Iterable[VariableDescriptor] = (),
        key_type: Optional[Type[Enum]] = None,
        startup_lines: Iterable[str] = (),
    ) -> None:
        self.config = config or TerminalConfig()
        self.key_type = key_type
        self.capture_logs = self.config.capture_logs
        self.buffer = LogBuffer(self.config.buffer_size)
        self.shell = CommandShell(self.buffer, context=self)
        self.history = CommandHistory(self.config.history_size)
        self.autocomplete = CommandAutocomplete()
        self.scheduler = CommandScheduler(self.execute)
        self.bindings = KeyBindings()
        self._log_handler: Optional[ConsoleLogHandler] = None
        self._captured_logger: Optional[logging.Logger] = None

        added = self.shell.registry.register(
            [*builtin_commands(self), *commands],
            [*builtin_variables(self), *variables],
        )
        self._report_registration_errors()
        self._index(added)
        for name in self.shell.registry.variable_names():
            self.autocomplete.register(name)

        if self.config.capture_logger is not None:
            self.capture(logging.getLogger(self.config.capture_logger))
        self.run_startup_lines(startup_lines)

    # -------------------- error surface ------------------------
    @property
    def issued_error(self) -> bool:
        return self.shell.issued_error

    @property
    def issued_error_message(self) -> Optional[str]:
        return self.shell.issued_error_message

    def _report_error(self) -> None:
        if self.shell.issued_error:
            self.buffer.append(
                f"Error: {self.shell.issued_error_message}",
                LogKind.ERROR,
                self.shell.last_traceback,
            )

    def _report_registration_errors(self) -> None:
        for message in self.shell.issued_errors:
            self.buffer.append(f"Error: {message}", LogKind.ERROR)

    # -------------------- registration -------------------------
    def _index(self, specs: Iterable[CommandSpec]) -> None:
        for spec in specs:
            if not spec.hidden:
                self.autocomplete.register(spec.name)

    def add_commands(self, descriptors: Iterable[CommandDescriptor]) -> List[CommandSpec]:
        self.shell.clear_error()
        added = self.shell.registry.register(descriptors)
        self._report_registration_errors()
        self._index(added)
        return added

    # -------------------- output -------------------------------
    def log(
        self,
        message: str,
        kind: LogKind = LogKind.SHELL_MESSAGE,
        stack_trace: Optional[str] = None,
    ) -> LogEntry:
        return self.buffer.append(message, kind, stack_trace)

    # -------------------- input --------------------------------
    def enter_command(self, line: str) -> bool:
        """Record *line* in history and run it; returns ``False`` on error."""

        self.history.push(line)
        return self.execute(line)

    def execute(self, line: str) -> bool:
        self.shell.run(line)
        if self.shell.issued_error:
            self._report_error()
            return False
        return True

    def run_startup_lines(self, lines: Iterable[str]) -> int:
        """Run every line that is neither blank nor a ``#`` comment."""

        executed = 0
        for line in lines:
            if line.startswith("#") or not line.strip():
                continue
            self.execute(line)
            executed += 1
        return executed

    def complete_command(self, text: str) -> Completion:
        completion = self.autocomplete.complete(text)
        if len(completion.matches) > 1:
            self.log("".join(match.ljust(completion.width + 4) for match in completion.matches))
        return completion

    def previous_command(self) -> str:
        return self.history.previous()

    def next_command(self) -> str:
        return self.history.next()

    # -------------------- time and keys ------------------------
    def schedule(self, delay: float, line: str, *, scaled: bool = True) -> ScheduledCommand:
        return self.scheduler.schedule(delay, line, scaled=scaled)

    def tick(self, delta: float) -> List[ScheduledCommand]:
        return self.scheduler.tick(delta)

    def fire_key(self, key: Enum) -> int:
        lines = self.bindings.commands_for(key)
        for line in lines:
            self.execute(line)
        return len(lines)

    # -------------------- host log capture ---------------------
    def capture(self, target: logging.Logger) -> ConsoleLogHandler:
        self.release()
        handler = ConsoleLogHandler(self.buffer, enabled=lambda: self.capture_logs)
        target.addHandler(handler)
        self._log_handler = handler
        self._captured_logger = target
        logger.debug("Capturing log records from %r", target.name)
        return handler

    def release(self) -> None:
        if self._log_handler is not None and self._captured_logger is not None:
            self._captured_logger.removeHandler(self._log_handler)
        self._log_handler = None
        self._captured_logger = None

    def close(self) -> None:
        self.release()


__all__ = ["Terminal"]
