"""AST validation of template bodies against a SandboxPolicy.

The body is parsed in memory and checked before it is compiled. Nothing is
stripped or rewritten: a body that breaks the policy is rejected whole, and
the stored source is never touched.
"""

from __future__ import annotations

import ast

from quire.environment.exceptions import SandboxViolationError, build_source_snippet
from quire.sandbox.policy import DEFAULT_POLICY, SandboxPolicy


class SandboxValidator(ast.NodeVisitor):
    """Reject forbidden names, attributes and import statements.

    Example:
        >>> tree = ast.parse("emit(eval('1'))")
        >>> SandboxValidator().validate(tree, source="emit(eval('1'))", location="t.tpl")
        Traceback (most recent call last):
            ...
        SandboxViolationError: Forbidden name 'eval' in template body

    """

    def __init__(self, policy: SandboxPolicy = DEFAULT_POLICY):
        self._policy = policy
        self._source: str | None = None
        self._location: str | None = None

    @property
    def policy(self) -> SandboxPolicy:
        return self._policy

    def validate(self, tree: ast.AST, *, source: str | None = None, location: str | None = None) -> None:
        """Walk the whole tree, raising on the first violation.

        Raises:
            SandboxViolationError: With line number and source snippet
        """
        self._source = source
        self._location = location
        try:
            self.visit(tree)
        finally:
            self._source = None
            self._location = None

    def _violation(self, node: ast.AST, message: str, construct: str) -> SandboxViolationError:
        lineno = getattr(node, "lineno", None)
        snippet = None
        if self._source and lineno:
            snippet = build_source_snippet(
                self._source, lineno, column=getattr(node, "col_offset", None)
            )
        return SandboxViolationError(
            f"{message} in template body",
            construct=construct,
            template_name=self._location,
            lineno=lineno,
            source_snippet=snippet,
        )

    def visit_Import(self, node: ast.Import) -> None:
        if not self._policy.allow_imports:
            names = ", ".join(alias.name for alias in node.names)
            raise self._violation(node, f"Import of '{names}' is not allowed", f"import {names}")
        self.generic_visit(node)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        if not self._policy.allow_imports:
            module = node.module or "."
            raise self._violation(
                node, f"Import from '{module}' is not allowed", f"from {module} import"
            )
        self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> None:
        if self._policy.is_forbidden_name(node.id):
            raise self._violation(node, f"Forbidden name '{node.id}'", node.id)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        if self._policy.is_forbidden_attribute(node.attr):
            raise self._violation(node, f"Forbidden attribute '.{node.attr}'", node.attr)
        self.generic_visit(node)

    def _check_definition(self, node: ast.AST, name: str) -> None:
        if self._policy.is_forbidden_name(name):
            raise self._violation(node, f"Forbidden name '{name}'", name)

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._check_definition(node, node.name)
        self.generic_visit(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        raise self._violation(node, "Async functions are not allowed", "async def")

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        raise self._violation(node, f"Class definition '{node.name}' is not allowed", "class")

    def visit_arg(self, node: ast.arg) -> None:
        self._check_definition(node, node.arg)
        self.generic_visit(node)
