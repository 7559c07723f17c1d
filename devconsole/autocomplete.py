"""Prefix completion over registered command and variable names."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List


@dataclass
class Completion:
    text: str
    matches: List[str] = field(default_factory=list)
    width: int = 0


class CommandAutocomplete:
    """Insertion-ordered symbol table; lookups ignore case."""

    def __init__(self, words: Iterable[str] = ()) -> None:
        self._words: Dict[str, str] = {}
        for word in words:
            self.register(word)

    def register(self, word: str) -> None:
        key = word.upper()
        if key and key not in self._words:
            self._words[key] = word

    def words(self) -> List[str]:
        return list(self._words.values())

    def matches(self, partial: str) -> List[str]:
        prefix = partial.upper()
        return [word for key, word in self._words.items() if key.startswith(prefix)]

    def complete(self, text: str) -> Completion:
        """Complete the last space-separated word of *text*.

        With one match the word is replaced by it; with several the text is
        returned unchanged together with the longest matching name length.
        """

        split = text.rfind(" ") + 1
        head, partial = text[:split], text[split:]
        found = self.matches(partial)
        width = max((len(word) for word in found), default=0)
        if len(found) == 1:
            return Completion(text=head + found[0], matches=found, width=width)
        return Completion(text=text, matches=found, width=width)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and word.upper() in self._words

    def __len__(self) -> int:
        return len(self._words)


__all__ = ["CommandAutocomplete", "Completion"]
