"""
Key — structural, slash-delimited identifier for datastore records.

Keys are always absolute and normalized on construction:
    Key("a//b/./c/")   → /a/b/c
    Key("/a/b/../c")   → /a/c
    Key("/../..")      → /

Equality, hashing and ordering use the normalized string.
"""

from __future__ import annotations

from dataclasses import dataclass

from bucketstore.core.errors import InvalidKeyError

SEPARATOR = "/"


def _normalize(raw: str) -> str:
    parts: list[str] = []
    for segment in raw.split(SEPARATOR):
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts:
                parts.pop()
            continue
        parts.append(segment)
    return SEPARATOR + SEPARATOR.join(parts)


@dataclass(frozen=True, order=True, slots=True)
class Key:
    """An immutable hierarchical key such as ``/blocks/CIQA4T``."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise InvalidKeyError(
                f"Key must be built from a string, got {type(self.value).__name__}"
            )
        object.__setattr__(self, "value", _normalize(self.value))

    @staticmethod
    def of(value: Key | str) -> Key:
        """Coerce a string or Key into a Key."""
        if isinstance(value, Key):
            return value
        return Key(value)

    @staticmethod
    def root() -> Key:
        return Key(SEPARATOR)

    @property
    def is_root(self) -> bool:
        return self.value == SEPARATOR

    @property
    def namespaces(self) -> list[str]:
        """Path segments, e.g. ["a", "b"] for /a/b."""
        if self.is_root:
            return []
        return self.value[1:].split(SEPARATOR)

    @property
    def name(self) -> str:
        """Last segment ("" for the root key)."""
        spaces = self.namespaces
        return spaces[-1] if spaces else ""

    @property
    def parent(self) -> Key:
        """Parent key. The root is its own parent."""
        return Key(SEPARATOR + SEPARATOR.join(self.namespaces[:-1]))

    def child(self, name: str) -> Key:
        return Key(f"{self.value}{SEPARATOR}{name}")

    def is_ancestor_of(self, other: Key) -> bool:
        if self == other:
            return False
        if self.is_root:
            return True
        return other.value.startswith(self.value + SEPARATOR)

    def is_descendant_of(self, other: Key) -> bool:
        return other.is_ancestor_of(self)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Key({self.value!r})"
