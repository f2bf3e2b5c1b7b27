"""Quire Template: one rendering pass over a template body.

Architecture:
    ```
    Template
    ├── path: str | None               # Source location (None → synthetic)
    ├── root: Block                    # Everything the body emitted
    ├── _capture: CaptureContext       # Open-block stack over root
    ├── _registry: BlockRegistry       # Named blocks, last write wins
    ├── extends_target: Template|None  # Owned parent, built by extend()
    └── _environment: Environment|None # Loader, executor, shared variables
    ```

Render Flow:
    ```
    executor → emit() → CaptureContext → Block(s) → BlockRegistry
        → "content" merge → extends_target.set_blocks() → parent render
    ```

A fresh Template is built for every top-level render and for every
ancestor in its chain. Instances are never shared between requests.

"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from quire.block import ABSENT, Block
from quire.capture import BlockFilter, CaptureContext
from quire.environment.exceptions import (
    TemplateError,
    TemplateRuntimeError,
    build_source_snippet,
)
from quire.environment.loaders import FileSystemLoader
from quire.environment.shared import SharedVariables
from quire.render_context import DEFAULT_MAX_EXTENDS_DEPTH, render_context
from quire.template.inheritance import merge_content
from quire.template.registry import CONTENT_BLOCK, BlockRegistry

if TYPE_CHECKING:
    from quire.environment.core import Environment
    from quire.sandbox.executor import ScriptExecutor

logger = logging.getLogger(__name__)

# Unbound templates read their location straight from disk
_FILE_LOADER = FileSystemLoader()


@lru_cache(maxsize=1)
def _default_executor() -> ScriptExecutor:
    from quire.sandbox.executor import PythonExecutor

    return PythonExecutor()


def drop_callables(variables: Mapping[str, Any]) -> dict[str, Any]:
    """Remove every callable variable before it reaches a template body.

    Functions, lambdas, bound methods, classes and any object defining
    ``__call__`` are dropped. This is a filter, not an error.
    """
    safe: dict[str, Any] = {}
    for name, value in variables.items():
        if callable(value):
            logger.debug("variable %r dropped: callables are not exposed to templates", name)
            continue
        safe[name] = value
    return safe


class Template:
    """A template body plus the state of its current rendering pass.

    Blocks are reachable through mapping access:

        >>> t = Template()
        >>> t["title"] = "Home"
        >>> str(t["title"])
        'Home'
        >>> t["missing"]
        ABSENT

    Shared environment variables are reachable only through ``shared``.

    Attributes:
        path: Source location, or None for a synthetic template
        root: Block holding everything the body emitted
        extends_target: Template this one extends, if any

    Example:
            >>> env = Environment(loader=DictLoader({
            ...     "layout": "emit('<main>', blocks['content'], '</main>')",
            ...     "page": "extend('layout')\\nemit('Hello')",
            ... }))
            >>> env.get_template("page").render()
            '<main>Hello</main>'

    """

    __slots__ = (
        "_capture",
        "_environment",
        "_explicit_content",
        "_registry",
        "_shared",
        "extends_target",
        "path",
        "root",
    )

    def __init__(self, path: str | None = None, environment: Environment | None = None):
        self.path = path
        self._environment = environment
        self.root = Block()
        self._capture = CaptureContext(self.root)
        self._registry = BlockRegistry()
        self._shared: SharedVariables | None = None
        self._explicit_content = False
        self.extends_target: Template | None = None

    @classmethod
    def with_environment(cls, environment: Environment, name: str | None) -> Template:
        """Create a template whose location is resolved through ``environment``."""
        path = environment.resolve_path(name) if name is not None else None
        return cls(path, environment)

    @property
    def environment(self) -> Environment | None:
        return self._environment

    @property
    def shared(self) -> SharedVariables:
        """Variables shared by every template in the environment.

        Unbound templates get a private store, passed on to the templates
        they extend.
        """
        if self._environment is not None:
            return self._environment.shared
        if self._shared is None:
            self._shared = SharedVariables()
        return self._shared

    @property
    def executor(self) -> ScriptExecutor:
        if self._environment is not None:
            return self._environment.executor
        return _default_executor()

    @property
    def is_capturing(self) -> bool:
        return self._capture.is_capturing

    # ------------------------------------------------------------------
    # Output and block stack
    # ------------------------------------------------------------------

    def emit(self, *parts: Any) -> None:
        """Write text into the capture context."""
        for part in parts:
            self._capture.emit(part)

    def block(
        self, name: str | None = None, value: Any = None, *, silent: bool = False
    ) -> Block:
        """Open a block, or assign a block's value directly.

        With a value, stores the block immediately; nothing is captured and
        no ``end_block()`` is needed. A ``silent`` block keeps its text out
        of the surrounding output and open ancestors.

        Raises:
            BlockNameError: If a value is given without a name
        """
        if value is not None:
            block = self._registry.assign(name, value)
            self._note_write(name)
            return block
        return self._capture.begin(name, silent=silent)

    def end_block(self, filter: BlockFilter | None = None) -> Block:
        """Close the innermost block, registering it if named.

        ``filter`` transforms only the stored content; open ancestors keep
        the raw text.

        Raises:
            BlockStackError: If no block is open
        """
        block = self._capture.end(filter)
        self._register(block)
        return block

    def end_block_recursive(self, filter: BlockFilter) -> Block:
        """Close the innermost block with ``filter`` applied for every ancestor.

        Raises:
            BlockStackError: If no block is open
        """
        block = self._capture.end_recursive(filter)
        self._register(block)
        return block

    endblock = end_block
    endblock_recursive = end_block_recursive

    @contextmanager
    def capture(
        self,
        name: str | None = None,
        filter: BlockFilter | None = None,
        *,
        recursive: bool = False,
        silent: bool = False,
    ) -> Iterator[Block]:
        """Open a block for the duration of a ``with`` statement.

        Example:
            with capture("title", filter=str.strip):
                emit("  Home  ")
        """
        block = self._capture.begin(name, silent=silent)
        yield block
        if recursive and filter is not None:
            self.end_block_recursive(filter)
        else:
            self.end_block(filter)

    def _register(self, block: Block) -> None:
        if block.name:
            self._registry.store(block)
            self._note_write(block.name)

    def _note_write(self, name: str | None) -> None:
        if name == CONTENT_BLOCK:
            self._explicit_content = True

    # ------------------------------------------------------------------
    # Named-block mapping
    # ------------------------------------------------------------------

    def __getitem__(self, name: str) -> Block | Any:
        return self._registry.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self._registry.set(name, value)
        self._note_write(name)

    def __delitem__(self, name: str) -> None:
        self._registry.delete(name)

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def __iter__(self) -> Iterator[str]:
        return iter(self._registry)

    def get(self, name: str, default: Any = ABSENT) -> Block | Any:
        """Return the named block, or ``default`` when it is absent."""
        block = self._registry.get(name)
        return block if block else default

    def block_names(self) -> list[str]:
        return self._registry.names()

    def get_blocks(self) -> dict[str, Block]:
        return self._registry.as_dict()

    def set_blocks(self, blocks: Mapping[str, Any]) -> None:
        """Replace the whole registry (no additive merge)."""
        self._registry.replace(blocks)

    # ------------------------------------------------------------------
    # Inheritance
    # ------------------------------------------------------------------

    def extend(self, path: str | None) -> None:
        """Declare the template this one extends.

        A no-op for an empty path or one resolving to this template's own
        location. Calling again replaces the previous target.
        """
        if not path:
            return
        env = self._environment
        if env is not None:
            if self.path == env.resolve_path(path):
                logger.debug("%s: ignoring extend() of itself", self.path)
                return
            self.extends_target = Template.with_environment(env, path)
        elif self.path != path:
            target = Template(path)
            target._shared = self.shared
            self.extends_target = target
        else:
            logger.debug("%s: ignoring extend() of itself", self.path)
            return
        logger.debug("%s extends %s", self.path or "(inline)", self.extends_target.path)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, variables: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
        """Run the body and return the final string.

        Variables come from a mapping, keyword arguments, or both. Callable
        values are dropped before the body sees them.

        Raises:
            TemplateNotFoundError: If the source location does not exist
            TemplateSyntaxError: If the body is not valid Python
            SandboxViolationError: If the body uses a forbidden construct
            BlockStackError: On end_block() with nothing open, or blocks left open
            ExtendsCycleError: If the extends chain loops or grows too deep
            TemplateRuntimeError: If the body raises anything else
        """
        context: dict[str, Any] = dict(variables or {})
        context.update(kwargs)

        max_depth = (
            self._environment.max_extends_depth
            if self._environment is not None
            else DEFAULT_MAX_EXTENDS_DEPTH
        )

        registry_snapshot = self._registry.snapshot()
        root_snapshot = self.root.get_content()
        extends_snapshot = self.extends_target
        self._explicit_content = False
        source: str | None = None

        try:
            with render_context(self.path, max_depth):
                if self.path is not None:
                    logger.debug("rendering %s", self.path)
                    source = self._load_source()
                    self.executor.execute(source, self.path, drop_callables(context), self)
                self._capture.close()

                merge_content(self._registry, self.root, explicit=self._explicit_content)

                if self.extends_target is not None:
                    self.extends_target.set_blocks(self.get_blocks())
                    return self.extends_target.render()
                return str(self.root)
        except Exception as e:
            # Leave nothing from the failed pass behind
            self._capture.reset()
            self._registry.restore(registry_snapshot)
            self.root.set_content(root_snapshot)
            self.extends_target = extends_snapshot
            if isinstance(e, TemplateError):
                raise
            raise self._enhance_error(e, source) from e

    def _load_source(self) -> str:
        assert self.path is not None
        if self._environment is not None:
            return self._environment.load_source(self.path)
        return _FILE_LOADER.load(self.path)

    def _enhance_error(self, error: Exception, source: str | None) -> TemplateRuntimeError:
        """Wrap an exception raised by the body with template location context."""
        lineno = None
        for frame in traceback.extract_tb(error.__traceback__):
            if frame.filename == self.path:
                lineno = frame.lineno
        snippet = build_source_snippet(source, lineno) if source and lineno else None
        detail = str(error).strip() or "(no details available)"
        return TemplateRuntimeError(
            f"{type(error).__name__}: {detail}",
            template_name=self.path,
            lineno=lineno,
            source_snippet=snippet,
        )

    def __repr__(self) -> str:
        return f"<Template {self.path or '(inline)'}>"
