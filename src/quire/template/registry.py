"""Block registry: the name → Block mapping owned by one Template.

Keys are unique and the last write wins. Lookups never raise: a missing
name yields ``ABSENT``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from quire.block import ABSENT, Block
from quire.environment.exceptions import BlockNameError, ErrorCode

CONTENT_BLOCK = "content"


class BlockRegistry:
    """Mapping of block names to Blocks.

    Example:
        >>> reg = BlockRegistry()
        >>> _ = reg.assign("title", "Home")
        >>> str(reg.get("title"))
        'Home'
        >>> reg.get("missing")
        ABSENT

    """

    __slots__ = ("_blocks",)

    def __init__(self, blocks: Mapping[str, Any] | None = None):
        self._blocks: dict[str, Block] = {}
        if blocks:
            self.replace(blocks)

    def assign(self, name: str | None, value: Any) -> Block:
        """Store a block with literal content, without capturing.

        Raises:
            BlockNameError: If name is missing (ErrorCode.MISSING_NAME)
        """
        if not name:
            raise BlockNameError(
                f"You are assigning a value of {value!r} to a block with no name!",
                code=ErrorCode.MISSING_NAME,
            )
        block = Block(name)
        block.set_content(value)
        self._blocks[name] = block
        return block

    def store(self, block: Block) -> None:
        """Register a closed named block, replacing any previous entry."""
        if block.name:
            self._blocks[block.name] = block

    def get(self, name: str) -> Block | Any:
        """Return the named Block, or ``ABSENT``."""
        return self._blocks.get(name, ABSENT)

    def set(self, name: str, value: Any) -> Block:
        """Replace an existing block's content, or create the block."""
        block = self._blocks.get(name)
        if block is None:
            block = self._blocks[name] = Block(name)
        block.set_content(value)
        return block

    def delete(self, name: str) -> None:
        """Remove a block; unknown names are ignored."""
        self._blocks.pop(name, None)

    def replace(self, blocks: Mapping[str, Any]) -> None:
        """Replace the whole mapping with copies of the given blocks.

        Blocks handed over by a child are copied, so a parent's pass never
        writes into the child's registry.
        """
        self._blocks = {name: Block(name, str(value)) for name, value in blocks.items()}

    def snapshot(self) -> dict[str, Block]:
        """Deep copy of the mapping for rollback."""
        return {name: block.copy() for name, block in self._blocks.items()}

    def restore(self, snapshot: dict[str, Block]) -> None:
        self._blocks = snapshot

    def as_dict(self) -> dict[str, Block]:
        return dict(self._blocks)

    def names(self) -> list[str]:
        return list(self._blocks)

    def __contains__(self, name: object) -> bool:
        return name in self._blocks

    def __iter__(self) -> Iterator[str]:
        return iter(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def __repr__(self) -> str:
        return f"<BlockRegistry {self.names()}>"
