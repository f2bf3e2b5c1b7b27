"""Quire Block: a named unit of accumulated template output.

Blocks use the StringBuilder pattern: text is appended to a list of parts
and joined once on read, so accumulation stays O(n) in output size.

Example:
    >>> b = Block("title")
    >>> b.append("Hello, ")
    >>> b.append("World")
    >>> str(b)
    'Hello, World'
    >>> "<h1>" + b + "</h1>"
    '<h1>Hello, World</h1>'

"""

from __future__ import annotations

from typing import Any


class Block:
    """Owned, mutable text buffer with an optional name.

    Unnamed blocks exist only while a capture is open. Named blocks end up
    in a template's block registry when their capture closes. Blocks compare
    equal by content (against a str or another Block) and are unhashable.

    Attributes:
        name: Block identifier, or None for anonymous capture scopes

    """

    __slots__ = ("_parts", "_size", "name")

    def __init__(self, name: str | None = None, content: str = ""):
        self.name = name
        self._parts: list[str] = [content] if content else []
        self._size = len(content)

    def append(self, text: str) -> None:
        """Concatenate text onto the existing content."""
        if text:
            self._parts.append(text)
            self._size += len(text)

    def set_content(self, text: Any) -> None:
        """Replace the content wholesale."""
        text = str(text)
        self._parts = [text] if text else []
        self._size = len(text)

    def get_content(self) -> str:
        """Return all text appended since creation, in append order."""
        if len(self._parts) > 1:
            # Collapse so repeated reads stay cheap
            self._parts = ["".join(self._parts)]
        return self._parts[0] if self._parts else ""

    def mark(self) -> int:
        """Return a position that ``truncate()`` can roll back to."""
        return self._size

    def truncate(self, mark: int) -> None:
        """Drop all content after character offset ``mark``."""
        if mark < self._size:
            self.set_content(self.get_content()[:mark])

    def copy(self) -> Block:
        return Block(self.name, self.get_content())

    def __str__(self) -> str:
        return self.get_content()

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        # A present block is truthy even when empty; only ABSENT is falsy
        return True

    def __add__(self, other: object) -> str:
        if isinstance(other, (str, Block)):
            return self.get_content() + str(other)
        return NotImplemented

    def __radd__(self, other: object) -> str:
        if isinstance(other, str):
            return other + self.get_content()
        return NotImplemented

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Block):
            return self.get_content() == other.get_content()
        if isinstance(other, str):
            return self.get_content() == other
        return NotImplemented

    # Unhashable: equality follows mutable content
    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<Block {self.name or '(anonymous)'} len={len(self)}>"


class _Absent:
    """Sentinel for a block name with no registry entry.

    Falsy, and stringifies as ``""`` so templates can emit a missing block
    without a guard.
    """

    __slots__ = ()

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return ""

    def __add__(self, other: object) -> str:
        if isinstance(other, (str, Block)):
            return str(other)
        return NotImplemented

    def __radd__(self, other: object) -> str:
        if isinstance(other, (str, Block)):
            return str(other)
        return NotImplemented

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


__all__ = ["ABSENT", "Block"]
