"""Inheritance resolver: how a child's blocks reach its parent.

Merge rule, applied at the end of every render pass:

1. ``"content"`` absent → it becomes the pass's root output.
2. ``"content"`` present from before the pass → existing + root output.
3. ``"content"`` closed or assigned during the pass → kept as written.

The child then hands its whole registry to the template it extends, which
replaces its own registry with it (no additive merge). Merging is one hop
deep: a middle layout that wants to wrap its child's content redefines the
``"content"`` block during its own pass; otherwise its whole output is
appended to the content it received.

"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from quire.block import Block
from quire.template.registry import CONTENT_BLOCK, BlockRegistry

if TYPE_CHECKING:
    from quire.template.core import Template


def merge_content(registry: BlockRegistry, root: Block, *, explicit: bool = False) -> Block:
    """Compute the ``"content"`` entry from a template's root output.

    Args:
        registry: The template's block registry (mutated in place)
        root: Block holding everything the template body emitted
        explicit: True when the body itself wrote ``"content"`` this pass

    Returns:
        The resulting content Block
    """
    existing = registry.get(CONTENT_BLOCK)
    if explicit and existing:
        return existing
    if not existing:
        return registry.set(CONTENT_BLOCK, root.get_content())
    return registry.set(CONTENT_BLOCK, existing + root)


def chain(template: Template) -> Iterator[Template]:
    """Iterate a template and the ancestors it currently extends.

    Stops at the first repeated instance, so a hand-built loop of
    Template objects cannot hang the caller.
    """
    seen: set[int] = set()
    current: Template | None = template
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.extends_target
