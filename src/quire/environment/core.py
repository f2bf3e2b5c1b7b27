"""Quire Environment: the collaborator every bound Template talks to.

The Environment resolves template names to locations, loads their source,
owns the script executor and hosts the variables shared by every template
it renders.

Configuration:
    ```python
    env = Environment(
        loader=FileSystemLoader("templates/"),
        globals={"site_name": "Quire"},
        policy=replace(DEFAULT_POLICY, allow_imports=True),
        max_extends_depth=20,
    )
    ```

Templates are never cached: ``get_template()`` builds a fresh instance on
every call, so no block state survives between requests. Compiled bodies
are cached by the executor instead.

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from quire.environment.loaders import FileSystemLoader, Loader
from quire.environment.shared import SharedVariables
from quire.render_context import DEFAULT_MAX_EXTENDS_DEPTH
from quire.sandbox.executor import PythonExecutor, ScriptExecutor
from quire.sandbox.policy import DEFAULT_POLICY, SandboxPolicy
from quire.template.core import Template

logger = logging.getLogger(__name__)


class Environment:
    """Central configuration for loading and rendering templates.

    Attributes:
        loader: Template source provider, or None to read paths from disk
        executor: Runs template bodies (``PythonExecutor`` by default)
        shared: Variables visible to every template through ``shared``
        max_extends_depth: Longest extends chain allowed in one render

    Example:
            >>> env = Environment(loader=DictLoader({"hello": "emit('Hi ', name)"}))
            >>> env.render("hello", name="Ada")
            'Hi Ada'

    """

    __slots__ = ("_executor", "_fallback_loader", "_loader", "_shared", "max_extends_depth")

    def __init__(
        self,
        loader: Loader | None = None,
        *,
        executor: ScriptExecutor | None = None,
        globals: Mapping[str, Any] | None = None,
        policy: SandboxPolicy | None = None,
        max_extends_depth: int = DEFAULT_MAX_EXTENDS_DEPTH,
    ):
        if executor is not None and policy is not None:
            raise ValueError("Pass either executor or policy, not both")
        if max_extends_depth < 1:
            raise ValueError(f"max_extends_depth must be at least 1, got {max_extends_depth}")
        self._loader = loader
        self._fallback_loader = FileSystemLoader()
        self._executor = executor or PythonExecutor(policy or DEFAULT_POLICY)
        self._shared = SharedVariables(globals)
        self.max_extends_depth = max_extends_depth

    @property
    def loader(self) -> Loader | None:
        return self._loader

    @property
    def executor(self) -> ScriptExecutor:
        return self._executor

    @property
    def shared(self) -> SharedVariables:
        return self._shared

    @property
    def globals(self) -> SharedVariables:
        """Alias of ``shared``."""
        return self._shared

    def resolve_path(self, name: str) -> str:
        """Turn a template name into the location templates are keyed by."""
        if self._loader is None:
            return name
        return self._loader.resolve(name)

    def load_source(self, location: str) -> str:
        """Read the source stored at a resolved location.

        Raises:
            TemplateNotFoundError: If nothing is stored there
        """
        loader = self._loader if self._loader is not None else self._fallback_loader
        return loader.load(location)

    def get_template(self, name: str) -> Template:
        """Build a fresh Template bound to this environment."""
        template = Template.with_environment(self, name)
        logger.debug("template %r resolved to %s", name, template.path)
        return template

    def render(self, name: str, variables: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
        """Shortcut for ``get_template(name).render(variables, **kwargs)``."""
        return self.get_template(name).render(variables, **kwargs)

    def list_templates(self) -> list[str]:
        if self._loader is None:
            return []
        return self._loader.list_templates()

    def __repr__(self) -> str:
        loader = type(self._loader).__name__ if self._loader is not None else None
        return f"<Environment loader={loader} shared={len(self._shared)}>"
