#!/usr/bin/env python3
"""Interactive terminal host for the developer console."""

from __future__ import annotations

import argparse
import logging
import readline
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from devconsole.config import TerminalConfig
from devconsole.log_buffer import LogEntry, LogKind
from devconsole.terminal import Terminal

PROMPT = "> "


def format_entry(entry: LogEntry) -> str:
    if entry.kind is LogKind.INPUT:
        return f"{PROMPT}{entry.message}"
    return entry.message


class Completer:
    def __init__(self, terminal: Terminal) -> None:
        self.terminal = terminal
        self._options: List[str] = []

    def complete(self, text: str, state: int) -> Optional[str]:
        if state == 0:
            self._options = self.terminal.autocomplete.matches(text)
        if state < len(self._options):
            return self._options[state]
        return None


class ConsoleRepl:
    def __init__(self, terminal: Terminal, stream: Optional[TextIO] = None) -> None:
        self.terminal = terminal
        self.stream = sys.stdout if stream is None else stream
        self._mark = terminal.buffer.appended
        self._last_tick = time.monotonic()

    def flush(self) -> None:
        buffer = self.terminal.buffer
        for entry in buffer.since(self._mark):
            print(format_entry(entry), file=self.stream)
        self._mark = buffer.appended

    def tick(self) -> None:
        now = time.monotonic()
        self.terminal.tick(now - self._last_tick)
        self._last_tick = now

    def run(self) -> None:
        completer = Completer(self.terminal)
        readline.set_completer(completer.complete)
        readline.parse_and_bind("tab: complete")
        self.flush()
        try:
            while True:
                try:
                    line = input(PROMPT)
                except EOFError:
                    print(file=self.stream)
                    break
                except KeyboardInterrupt:
                    print(file=self.stream)
                    continue
                self.tick()
                if line.strip():
                    readline.add_history(line)
                    self.terminal.enter_command(line)
                self.flush()
        finally:
            self.terminal.close()


def _quote_argument(arg: str) -> str:
    if arg and not any(ch.isspace() for ch in arg):
        return arg
    quote = "'" if "\"" in arg else "\""
    return f"{quote}{arg}{quote}"


def _read_script(path: Path) -> List[str]:
    return path.read_text(encoding="utf-8").splitlines()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args_list = list(sys.argv[1:] if argv is None else argv)
    parser = argparse.ArgumentParser(prog="devconsole", add_help=True)
    parser.add_argument("--script", dest="script", metavar="PATH", help="Run startup commands from a file before anything else")
    parser.add_argument("--log-level", dest="log_level", default="WARNING", help="Logging level for console diagnostics")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="Command to execute non-interactively")
    parsed = parser.parse_args(args_list)

    logging.basicConfig(level=parsed.log_level.upper(), format="[%(asctime)s] %(levelname)s: %(message)s")

    startup: List[str] = []
    if parsed.script:
        try:
            startup = _read_script(Path(parsed.script))
        except OSError as exc:
            print(f"Error: cannot read script {parsed.script}: {exc}", file=sys.stderr)
            return 1

    terminal = Terminal(TerminalConfig.from_env(), startup_lines=startup)
    repl = ConsoleRepl(terminal)

    if parsed.command:
        ok = terminal.enter_command(" ".join(_quote_argument(arg) for arg in parsed.command))
        repl.flush()
        terminal.close()
        return 0 if ok else 1

    repl.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
