"""Command and variable registration for the developer console."""

from __future__ import annotations

import dataclasses
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from types import ModuleType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from devconsole.arguments import CommandArg

Handler = Callable[[Any, List[CommandArg]], None]

logger = logging.getLogger("devconsole.registry")


class RegistrationError(RuntimeError):
    """Raised when a variable cannot be registered."""


class VariableKind(Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    ENUM = "enum"

    @classmethod
    def from_type(cls, value_type: type) -> "VariableKind":
        # bool is a subclass of int, so it has to be checked first
        if value_type is bool:
            return cls.BOOL
        if value_type is int:
            return cls.INT
        if value_type is float:
            return cls.FLOAT
        if value_type is str:
            return cls.STRING
        if isinstance(value_type, type) and issubclass(value_type, Enum):
            return cls.ENUM
        raise RegistrationError(
            f"can't register variable of type {getattr(value_type, '__name__', value_type)!r}"
            " - registered variables must be string, int, float, bool or enum"
        )


def _strip_marker(name: str, marker: str) -> str:
    index = name.upper().find(marker)
    if index < 0:
        return name
    return name[:index] + name[index + len(marker) :]


def infer_command_name(identifier: str) -> str:
    """Derive a command name from a function name such as ``command_clear``."""

    return _strip_marker(identifier, "COMMAND").strip("_")


# ---------------------------------------------------------------------------
# Descriptors supplied by the embedding application
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CommandDescriptor:
    handler: Optional[Handler]
    name: Optional[str] = None
    min_args: int = 0
    max_args: int = -1
    help: Optional[str] = None
    usage: Optional[str] = None
    hidden: bool = False
    placeholder: bool = False

    def resolved_name(self) -> str:
        if self.name:
            return self.name
        if self.handler is None:
            return ""
        return infer_command_name(getattr(self.handler, "__name__", ""))

    @classmethod
    def from_signature(
        cls,
        func: Callable[..., Any],
        name: Optional[str] = None,
        help: Optional[str] = None,
    ) -> "CommandDescriptor":
        """Build a placeholder whose arity mirrors the parameters of *func*."""

        required = 0
        total = 0
        unbounded = False
        for parameter in inspect.signature(func).parameters.values():
            if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
                unbounded = True
            elif parameter.kind in (
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            ):
                total += 1
                if parameter.default is inspect.Parameter.empty:
                    required += 1
        if name is None:
            name = infer_command_name(_strip_marker(func.__name__, "FRONT"))
        return cls(
            handler=None,
            name=name,
            min_args=required,
            max_args=-1 if unbounded else total,
            help=help,
            placeholder=True,
        )


@dataclass(frozen=True)
class VariableDescriptor:
    kind: VariableKind
    get: Callable[[], Any]
    set: Callable[[Any], None]
    name: Optional[str] = None
    enum_type: Optional[type] = None

    def resolved_name(self) -> str:
        return self.name or getattr(self.get, "__name__", "")


def command(
    name: Optional[str] = None,
    *,
    min_args: int = 0,
    max_args: int = -1,
    help: Optional[str] = None,
    usage: Optional[str] = None,
    hidden: bool = False,
) -> Callable[[Handler], Handler]:
    def decorator(func: Handler) -> Handler:
        func.__command_definition__ = CommandDescriptor(
            handler=func,
            name=name,
            min_args=min_args,
            max_args=max_args,
            help=help,
            usage=usage,
            hidden=hidden,
        )
        return func

    return decorator


def front_command(
    name: Optional[str] = None, *, help: Optional[str] = None
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Declare arity and help for a command implemented under the same name elsewhere."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        func.__command_definition__ = CommandDescriptor.from_signature(func, name, help)
        return func

    return decorator


def variable(
    name: Optional[str],
    value_type: type,
    get: Callable[[], Any],
    set: Callable[[Any], None],
) -> VariableDescriptor:
    kind = VariableKind.from_type(value_type)
    return VariableDescriptor(
        kind=kind,
        get=get,
        set=set,
        name=name,
        enum_type=value_type if kind is VariableKind.ENUM else None,
    )


def collect_commands(namespace: Union[ModuleType, Mapping[str, Any]]) -> List[CommandDescriptor]:
    """Return every command descriptor attached to callables in *namespace*."""

    values = vars(namespace).values() if isinstance(namespace, ModuleType) else namespace.values()
    return [
        obj.__command_definition__
        for obj in list(values)
        if callable(obj) and hasattr(obj, "__command_definition__")
    ]


# ---------------------------------------------------------------------------
# Registered entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CommandSpec:
    name: str
    handler: Optional[Handler]
    min_args: int = 0
    max_args: int = -1
    help: Optional[str] = None
    usage: Optional[str] = None
    hidden: bool = False


@dataclass(frozen=True)
class VariableSpec:
    name: str
    kind: VariableKind
    get: Callable[[], Any]
    set: Callable[[Any], None]
    enum_type: Optional[type] = None


class CommandRegistry:
    """Name-keyed command and variable tables; names are stored upper-cased.

    Non-fatal problems (duplicate or malformed commands, placeholders
    without an implementation) are passed to *on_error*. Variable
    problems raise :class:`RegistrationError`.
    """

    def __init__(self, on_error: Optional[Callable[[str], None]] = None) -> None:
        self._commands: Dict[str, CommandSpec] = {}
        self._variables: Dict[str, VariableSpec] = {}
        self._on_error = on_error

    # ------------------------------------------------------------------
    def register(
        self,
        commands: Iterable[CommandDescriptor] = (),
        variables: Iterable[VariableDescriptor] = (),
    ) -> List[CommandSpec]:
        """Register descriptors in order, then backfill placeholders.

        Returns the command specs that ended up in the table.
        """

        added: List[CommandSpec] = []
        placeholders: Dict[str, CommandDescriptor] = {}
        for descriptor in commands:
            if descriptor.placeholder:
                placeholders[descriptor.resolved_name().upper()] = descriptor
                continue
            spec = self.add_command(descriptor)
            if spec is not None:
                added.append(spec)
        for descriptor in variables:
            self.add_variable(descriptor)
        for key, placeholder in placeholders.items():
            spec = self._backfill(key, placeholder)
            if spec is not None:
                added.append(spec)
        return added

    def add_command(self, descriptor: CommandDescriptor) -> Optional[CommandSpec]:
        name = descriptor.resolved_name().upper()
        if not name or " " in name:
            self._report(f"Command name {name!r} is not valid.")
            return None
        if descriptor.min_args < 0 or (
            descriptor.max_args != -1 and descriptor.max_args < descriptor.min_args
        ):
            self._report(
                f"Command {name} has invalid argument bounds "
                f"({descriptor.min_args}, {descriptor.max_args})."
            )
            return None
        if name in self._commands:
            self._report(f"Command {name} is already defined.")
            return None
        spec = CommandSpec(
            name=name,
            handler=descriptor.handler,
            min_args=descriptor.min_args,
            max_args=descriptor.max_args,
            help=descriptor.help,
            usage=descriptor.usage,
            hidden=descriptor.hidden,
        )
        self._commands[name] = spec
        return spec

    def add_variable(self, descriptor: VariableDescriptor) -> VariableSpec:
        if not isinstance(descriptor.kind, VariableKind):
            raise RegistrationError(
                f"can't register variable {descriptor.resolved_name()} - registered variables"
                " must be string, int, float, bool or enum"
            )
        if descriptor.kind is VariableKind.ENUM and not (
            isinstance(descriptor.enum_type, type) and issubclass(descriptor.enum_type, Enum)
        ):
            raise RegistrationError(
                f"can't register variable {descriptor.resolved_name()} - enum variables need an enum type"
            )
        name = descriptor.resolved_name().upper()
        if not name:
            raise RegistrationError("can't register a variable without a name")
        if name in self._variables:
            raise RegistrationError(f"there is already a variable called {name}")
        spec = VariableSpec(
            name=name,
            kind=descriptor.kind,
            get=descriptor.get,
            set=descriptor.set,
            enum_type=descriptor.enum_type,
        )
        self._variables[name] = spec
        return spec

    def _backfill(self, key: str, placeholder: CommandDescriptor) -> Optional[CommandSpec]:
        existing = self._commands.get(key)
        if existing is None:
            # keep it visible to help, dispatch rejects it until implemented
            self._report(f"{key} is missing an implementation.")
            spec = CommandSpec(
                name=key,
                handler=None,
                min_args=placeholder.min_args,
                max_args=placeholder.max_args,
                help=placeholder.help,
            )
            self._commands[key] = spec
            return spec
        updated = dataclasses.replace(
            existing,
            min_args=placeholder.min_args,
            max_args=placeholder.max_args,
            help=placeholder.help if placeholder.help is not None else existing.help,
        )
        self._commands[key] = updated
        return None

    def _report(self, message: str) -> None:
        logger.warning("Registration error: %s", message)
        if self._on_error is not None:
            self._on_error(message)

    # ------------------------------------------------------------------
    def get(self, name: str) -> Optional[CommandSpec]:
        return self._commands.get(name.upper())

    def get_variable(self, name: str) -> Optional[VariableSpec]:
        return self._variables.get(name.upper())

    def names(self) -> List[str]:
        return list(self._commands.keys())

    def values(self) -> Iterable[CommandSpec]:
        return self._commands.values()

    def variable_names(self) -> List[str]:
        return list(self._variables.keys())

    def variables(self) -> Iterable[VariableSpec]:
        return self._variables.values()


__all__ = [
    "CommandDescriptor",
    "CommandRegistry",
    "CommandSpec",
    "Handler",
    "RegistrationError",
    "VariableDescriptor",
    "VariableKind",
    "VariableSpec",
    "collect_commands",
    "command",
    "front_command",
    "infer_command_name",
    "variable",
]
