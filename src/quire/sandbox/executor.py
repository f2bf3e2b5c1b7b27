"""Script executors: run a template body and feed its output to a Template.

A template body is Python source. The executor parses it in memory,
validates it against the sandbox policy, compiles it (cached by content
hash) and executes it in a namespace holding the template's variables and
the template API:

    ```python
    # page.tpl
    extend("layout.tpl")

    block("title", "Home")

    block("sidebar")
    emit("<ul>")
    for item in links:
        emit("<li>", item, "</li>")
    emit("</ul>")
    endblock()

    with capture("footer", filter=str.upper):
        emit("thanks for reading")

    emit("<p>Hello, ", user, "</p>")
    ```

Namespace:
- ``emit``/``echo``: write fragments; ``print`` is redirected here too
- ``block``/``endblock``/``endblock_recursive``/``capture``: block stack
- ``extend``: declare the parent template
- ``blocks``: the template's named-block mapping
- ``shared``: the environment's shared variable store
- ``template``: the Template itself

Variables never shadow these names.

"""

from __future__ import annotations

import ast
import builtins
import logging
from collections import OrderedDict
from collections.abc import Mapping
from hashlib import sha256
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from quire.environment.exceptions import TemplateSyntaxError, build_source_snippet
from quire.sandbox.policy import DEFAULT_POLICY, SandboxPolicy
from quire.sandbox.validator import SandboxValidator

if TYPE_CHECKING:
    import types

    from quire.template.core import Template

logger = logging.getLogger(__name__)


@runtime_checkable
class ScriptExecutor(Protocol):
    """Runs a template body, writing its output through ``template.emit``."""

    def execute(
        self,
        source: str,
        location: str,
        variables: Mapping[str, Any],
        template: Template,
    ) -> None: ...


class PythonExecutor:
    """Execute Python template bodies inside a restricted namespace.

    Compiled code objects are kept in an LRU cache keyed by a sha256 of
    location and source, so re-rendering an unchanged template skips
    parsing and validation.

    Args:
        policy: Sandbox policy enforced before execution
        cache_size: Maximum number of compiled bodies kept

    Note:
        The policy blocks the obvious escape routes (imports, eval/exec,
        dunder attributes, process-control attributes) but an in-process
        namespace is not an isolation boundary. Do not execute template
        bodies written by untrusted authors.

    """

    __slots__ = ("_builtins", "_cache", "_cache_size", "_policy", "_validator")

    def __init__(self, policy: SandboxPolicy = DEFAULT_POLICY, cache_size: int = 128):
        self._policy = policy
        self._validator = SandboxValidator(policy)
        self._cache: OrderedDict[str, types.CodeType] = OrderedDict()
        self._cache_size = cache_size
        self._builtins = {
            name: getattr(builtins, name)
            for name in policy.allowed_builtins
            if hasattr(builtins, name)
        }

    @property
    def policy(self) -> SandboxPolicy:
        return self._policy

    def compile(self, source: str, location: str) -> types.CodeType:
        """Parse, validate and compile a body, using the cache when possible.

        Raises:
            TemplateSyntaxError: If the body is not valid Python
            SandboxViolationError: If the body breaks the policy
        """
        key = sha256(f"{location}\0{source}".encode()).hexdigest()
        code = self._cache.get(key)
        if code is not None:
            self._cache.move_to_end(key)
            logger.debug("compiled body cache hit for %s", location)
            return code

        try:
            tree = ast.parse(source, filename=location)
        except SyntaxError as e:
            snippet = build_source_snippet(source, e.lineno) if e.lineno else None
            raise TemplateSyntaxError(
                f"Invalid template body: {e.msg}",
                template_name=location,
                lineno=e.lineno,
                source_snippet=snippet,
            ) from e

        self._validator.validate(tree, source=source, location=location)
        code = compile(tree, location, "exec")

        self._cache[key] = code
        if len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
        return code

    def build_namespace(self, template: Template, variables: Mapping[str, Any]) -> dict[str, Any]:
        """Globals for one execution: builtins, template API, then variables."""

        def _print(*args: Any, sep: str = " ", end: str = "\n") -> None:
            template.emit(sep.join(str(arg) for arg in args) + end)

        namespace: dict[str, Any] = {
            "__builtins__": {**self._builtins, "print": _print},
            "__name__": "__quire_template__",
            "emit": template.emit,
            "echo": template.emit,
            "print": _print,
            "block": template.block,
            "endblock": template.end_block,
            "end_block": template.end_block,
            "endblock_recursive": template.end_block_recursive,
            "end_block_recursive": template.end_block_recursive,
            "capture": template.capture,
            "extend": template.extend,
            "blocks": template,
            "shared": template.shared,
            "template": template,
        }
        for name, value in variables.items():
            if name in namespace:
                # The template API always wins over a same-named variable
                logger.debug("variable %r skipped: shadows the template API", name)
                continue
            namespace[name] = value
        return namespace

    def execute(
        self,
        source: str,
        location: str,
        variables: Mapping[str, Any],
        template: Template,
    ) -> None:
        code = self.compile(source, location)
        exec(code, self.build_namespace(template, variables))

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_info(self) -> dict[str, int]:
        return {"size": len(self._cache), "max_size": self._cache_size}
