"""Quire RenderContext: per-render state for one extends chain.

A top-level ``Template.render()`` opens a RenderContext; every ancestor
rendered through ``extends`` runs in a child context that shares the same
chain list. The chain records each template location in render order, so a
template that reappears further up its own inheritance chain is caught
before it recurses.

Benefits:
    - Cycle detection across the whole chain, not only self-extension
    - Depth limit independent of Python's recursion limit
    - Thread-safe and async-safe via ContextVar

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field

from quire.environment.exceptions import ErrorCode, ExtendsCycleError

# 50 is deeper than any real layout hierarchy while still stopping runaway
# chains long before the interpreter's recursion limit.
DEFAULT_MAX_EXTENDS_DEPTH = 50


@dataclass
class RenderContext:
    """Per-render state shared along one extends chain.

    Attributes:
        template_name: Location of the template currently rendering
        depth: Number of extends hops from the top-level template
        max_extends_depth: Maximum number of templates in one chain
        chain: Locations rendered so far, top-level child first
    """

    template_name: str | None = None
    depth: int = 0
    max_extends_depth: int = DEFAULT_MAX_EXTENDS_DEPTH
    chain: list[str] = field(default_factory=list)

    def check_extends(self, location: str) -> None:
        """Validate that ``location`` may be rendered as the next ancestor.

        Raises:
            ExtendsCycleError: If the location is already on the chain, or
                the chain would exceed max_extends_depth
        """
        if location in self.chain:
            loop = " → ".join([*self.chain[self.chain.index(location):], location])
            raise ExtendsCycleError(
                f"Circular template inheritance: {loop}",
                chain=self.chain,
                template_name=self.template_name,
                code=ErrorCode.EXTENDS_CYCLE,
            )
        if self.depth + 1 >= self.max_extends_depth:
            raise ExtendsCycleError(
                f"Maximum extends depth exceeded ({self.max_extends_depth}) "
                f"when extending '{location}'",
                chain=self.chain,
                template_name=self.template_name,
                code=ErrorCode.EXTENDS_DEPTH,
            )

    def child_context(self, template_name: str | None = None) -> RenderContext:
        """Create the context for the next ancestor in the chain.

        Shares ``chain`` with the parent so every hop sees the full path.
        """
        return RenderContext(
            template_name=template_name,
            depth=self.depth + 1,
            max_extends_depth=self.max_extends_depth,
            chain=self.chain,
        )


_render_context: ContextVar[RenderContext | None] = ContextVar(
    "quire_render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None if not in a render)."""
    return _render_context.get()


def set_render_context(ctx: RenderContext) -> Token[RenderContext | None]:
    """Set a RenderContext and return the reset token."""
    return _render_context.set(ctx)


def reset_render_context(token: Token[RenderContext | None]) -> None:
    """Reset render context using a token from set_render_context."""
    _render_context.reset(token)


@contextmanager
def render_context(
    template_name: str | None = None,
    max_extends_depth: int = DEFAULT_MAX_EXTENDS_DEPTH,
) -> Iterator[RenderContext]:
    """Enter the render context for one template in a chain.

    Outside any render, starts a new chain. Inside one (an ancestor being
    rendered through extends), checks the location against the chain and
    enters a child context.

    Raises:
        ExtendsCycleError: On a cycle or when the chain grows too deep

    Example:
        with render_context(template_name="page.tpl") as ctx:
            output = executor.execute(...)
    """
    current = _render_context.get()
    if current is None:
        ctx = RenderContext(template_name=template_name, max_extends_depth=max_extends_depth)
    else:
        if template_name is not None:
            current.check_extends(template_name)
        ctx = current.child_context(template_name)
    if template_name is not None:
        ctx.chain.append(template_name)
    token = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)
        if template_name is not None:
            ctx.chain.pop()
