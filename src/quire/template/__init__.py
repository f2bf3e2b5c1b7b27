"""Quire Template package: rendering passes, block registry and inheritance."""

from quire.template.core import Template, drop_callables
from quire.template.inheritance import chain, merge_content
from quire.template.registry import CONTENT_BLOCK, BlockRegistry

__all__ = [
    "CONTENT_BLOCK",
    "BlockRegistry",
    "Template",
    "chain",
    "drop_callables",
    "merge_content",
]
