"""Key to command-line bindings."""

from __future__ import annotations

from collections import defaultdict
from enum import Enum
from typing import Dict, List


class KeyBindings:
    def __init__(self) -> None:
        self._bindings: Dict[Enum, List[str]] = defaultdict(list)

    def add(self, key: Enum, line: str) -> None:
        self._bindings[key].append(line)

    def reset(self, key: Enum) -> bool:
        return self._bindings.pop(key, None) is not None

    def commands_for(self, key: Enum) -> List[str]:
        return list(self._bindings.get(key, ()))

    def keys(self) -> List[Enum]:
        return list(self._bindings.keys())


__all__ = ["KeyBindings"]
