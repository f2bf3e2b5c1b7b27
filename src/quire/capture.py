"""Quire capture context: the block stack a template body writes into.

The script executor never owns a buffer. It receives ``emit`` and every
fragment it writes is parked as *pending* text until the next stack
operation flushes it into the root block and every block currently open:

    ```
    emit("A")        pending=["A"]
    begin("x")       flush → root="A"                  push x
    emit("B")        pending=["B"]
    end()            flush → root="AB", x="B"          pop x
    emit("C")        pending=["C"]
    close()          flush → root="ABC"
    ```

Invariants:
- Each fragment lands exactly once in the root and in each block open when
  it is flushed, in emission order.
- A popped block holds exactly the text captured between its push and pop.

State:
    idle (depth 0) → capturing (depth ≥ 1)

"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from quire.block import Block
from quire.environment.exceptions import BlockStackError, ErrorCode

BlockFilter = Callable[[str], object]


@dataclass(slots=True)
class _Frame:
    """An open block plus the size of each ancestor when it was pushed."""

    block: Block
    marks: tuple[int, ...]
    silent: bool = False


class CaptureContext:
    """Stack of open blocks over a permanent root block.

    Attributes:
        root: Block receiving every flushed fragment

    Example:
        >>> ctx = CaptureContext()
        >>> ctx.emit("A")
        >>> _ = ctx.begin("x")
        >>> ctx.emit("B")
        >>> str(ctx.end())
        'B'
        >>> ctx.emit("C")
        >>> ctx.close()
        >>> str(ctx.root)
        'ABC'

    """

    __slots__ = ("_pending", "_stack", "root")

    def __init__(self, root: Block | None = None):
        self.root = root if root is not None else Block()
        self._stack: list[_Frame] = []
        self._pending: list[str] = []

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def is_capturing(self) -> bool:
        return bool(self._stack)

    def open_names(self) -> list[str | None]:
        """Names of open blocks, outermost first."""
        return [frame.block.name for frame in self._stack]

    def emit(self, text: object) -> None:
        """Write a fragment. This is the executor's only output channel."""
        text = str(text)
        if text:
            self._pending.append(text)

    def _ancestors(self) -> list[Block]:
        return [self.root, *(frame.block for frame in self._stack)]

    def _flush(self) -> None:
        if not self._pending:
            return
        text = "".join(self._pending)
        self._pending.clear()
        for block in self._ancestors():
            block.append(text)

    def begin(self, name: str | None = None, *, silent: bool = False) -> Block:
        """Flush pending text to every open block, then push a new one.

        A ``silent`` block is withdrawn from its ancestors when it closes, so
        its text reaches only the block itself.
        """
        self._flush()
        marks = tuple(block.mark() for block in self._ancestors())
        block = Block(name)
        self._stack.append(_Frame(block, marks, silent))
        return block

    def _withdraw(self, frame: _Frame, replacement: str = "") -> None:
        for ancestor, mark in zip(self._ancestors(), frame.marks, strict=True):
            ancestor.truncate(mark)
            ancestor.append(replacement)

    def _pop(self) -> _Frame:
        if not self._stack:
            raise BlockStackError(
                "end_block() called with no open block",
                code=ErrorCode.EMPTY_STACK,
            )
        self._flush()
        return self._stack.pop()

    def end(self, filter: BlockFilter | None = None) -> Block:
        """Pop the innermost block.

        ``filter`` rewrites only the popped block's final content. Open
        ancestors keep the raw text they already received.

        Raises:
            BlockStackError: If no block is open (ErrorCode.EMPTY_STACK)
        """
        frame = self._pop()
        block = frame.block
        if frame.silent:
            self._withdraw(frame)
        if filter is not None:
            block.set_content(filter(block.get_content()))
        return block

    def end_recursive(self, filter: BlockFilter) -> Block:
        """Pop the innermost block, applying ``filter`` for every ancestor too.

        Each ancestor (root included) has the text it received during the
        popped block's lifetime replaced by the filtered content.

        Raises:
            BlockStackError: If no block is open (ErrorCode.EMPTY_STACK)
        """
        frame = self._pop()
        block = frame.block
        block.set_content(filter(block.get_content()))
        self._withdraw(frame, "" if frame.silent else block.get_content())
        return block

    def close(self) -> None:
        """Flush pending text at the end of a body.

        Raises:
            BlockStackError: If blocks are still open (ErrorCode.UNCLOSED_BLOCK)
        """
        if self._stack:
            names = ", ".join(repr(name) if name else "<anonymous>" for name in self.open_names())
            raise BlockStackError(
                f"Template finished with {len(self._stack)} unclosed block(s): {names}",
                code=ErrorCode.UNCLOSED_BLOCK,
            )
        self._flush()

    def reset(self) -> None:
        """Discard open blocks and pending text."""
        self._stack.clear()
        self._pending.clear()

    def __repr__(self) -> str:
        return f"<CaptureContext depth={self.depth} pending={len(self._pending)}>"
