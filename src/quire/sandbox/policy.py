"""Sandbox policy for template bodies.

A frozen dataclass so one policy can be shared by every executor and
environment. Derive variants with ``dataclasses.replace``:

    >>> from dataclasses import replace
    >>> strict = replace(DEFAULT_POLICY, allowed_builtins=frozenset({"len", "str"}))

Attribute rules are ``fnmatch`` patterns.
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase

# Names a template body may never reference.
FORBIDDEN_NAMES: frozenset[str] = frozenset(
    {
        # Dynamic code execution
        "exec",
        "eval",
        "compile",
        "__import__",
        # Ambient state
        "globals",
        "locals",
        "vars",
        "dir",
        # Reflection that sidesteps attribute checks
        "getattr",
        "setattr",
        "delattr",
        "object",
        "type",
        "super",
        # Process control and I/O
        "open",
        "input",
        "breakpoint",
        "exit",
        "quit",
        "help",
        "memoryview",
    }
)

# Attributes reaching process control or ambient environment state.
FORBIDDEN_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "system",
        "popen*",
        "putenv",
        "unsetenv",
        "environ*",
        "spawn*",
        "exec[lv]*",
        "fork*",
        "kill*",
        "_exit",
        "gi_frame",
        "gi_code",
        "f_globals",
        "f_locals",
        "f_builtins",
        "tb_frame",
    }
)

SAFE_BUILTINS: frozenset[str] = frozenset(
    {
        "abs",
        "all",
        "any",
        "bool",
        "chr",
        "dict",
        "divmod",
        "enumerate",
        "filter",
        "float",
        "format",
        "frozenset",
        "int",
        "isinstance",
        "len",
        "list",
        "map",
        "max",
        "min",
        "ord",
        "range",
        "repr",
        "reversed",
        "round",
        "set",
        "slice",
        "sorted",
        "str",
        "sum",
        "tuple",
        "zip",
        "ValueError",
        "KeyError",
        "IndexError",
        "TypeError",
    }
)


@dataclass(frozen=True, slots=True)
class SandboxPolicy:
    """What a template body may touch.

    Attributes:
        forbidden_names: Names rejected wherever they appear
        forbidden_attributes: fnmatch patterns for rejected attribute names
        allowed_builtins: Builtins exposed to the body; everything else is absent
        allow_imports: Permit ``import`` / ``from ... import`` statements
        allow_dunder_access: Permit ``__dunder__`` names and attributes
    """

    forbidden_names: frozenset[str] = FORBIDDEN_NAMES
    forbidden_attributes: frozenset[str] = FORBIDDEN_ATTRIBUTES
    allowed_builtins: frozenset[str] = SAFE_BUILTINS
    allow_imports: bool = False
    allow_dunder_access: bool = False

    def is_forbidden_name(self, name: str) -> bool:
        if name in self.forbidden_names:
            return True
        return not self.allow_dunder_access and _is_dunder(name)

    def is_forbidden_attribute(self, attr: str) -> bool:
        if not self.allow_dunder_access and _is_dunder(attr):
            return True
        return any(fnmatchcase(attr, pattern) for pattern in self.forbidden_attributes)


def _is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


DEFAULT_POLICY = SandboxPolicy()
