"""Shared variable store for a Quire environment.

Variables stored here are visible to every template rendered in the same
environment (or, for unbound templates, the same extends chain). Templates
reach the store through ``shared``, never through their block mapping:

    ```python
    shared.title = "Home"          # set
    "title" in shared              # isset
    emit(shared.title)             # get
    del shared.title               # unset
    ```

Mutations use copy-on-write so readers never see a half-applied update.
There is no locking: concurrent writers must serialize externally.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


class SharedVariables:
    """Attribute- and dict-style access to a variable mapping.

    Supports:
        - shared.name / shared["name"]
        - shared.name = value / shared["name"] = value
        - "name" in shared
        - del shared.name / del shared["name"]
        - shared.update({...}), shared.get("name", default)
    """

    __slots__ = ("_vars",)

    def __init__(self, initial: Mapping[str, Any] | None = None):
        object.__setattr__(self, "_vars", dict(initial or {}))

    def _replace(self, new: dict[str, Any]) -> None:
        object.__setattr__(self, "_vars", new)

    def __getattr__(self, name: str) -> Any:
        # Slot not yet set (copy/pickle), or a protocol lookup
        if name == "_vars" or name.startswith("__"):
            raise AttributeError(name)
        try:
            return self._vars[name]
        except KeyError:
            raise AttributeError(f"No shared variable named {name!r}") from None

    def __setattr__(self, name: str, value: Any) -> None:
        self[name] = value

    def __delattr__(self, name: str) -> None:
        if name not in self._vars:
            raise AttributeError(f"No shared variable named {name!r}")
        del self[name]

    def __getitem__(self, name: str) -> Any:
        return self._vars[name]

    def __setitem__(self, name: str, value: Any) -> None:
        new = self._vars.copy()
        new[name] = value
        self._replace(new)

    def __delitem__(self, name: str) -> None:
        new = self._vars.copy()
        del new[name]
        self._replace(new)

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)

    def get(self, name: str, default: Any = None) -> Any:
        return self._vars.get(name, default)

    def update(self, mapping: Mapping[str, Any]) -> None:
        """Batch update in one copy."""
        new = self._vars.copy()
        new.update(mapping)
        self._replace(new)

    def copy(self) -> dict[str, Any]:
        """Return a copy of the underlying dict."""
        return self._vars.copy()

    def keys(self):
        return self._vars.keys()

    def values(self):
        return self._vars.values()

    def items(self):
        return self._vars.items()

    def __repr__(self) -> str:
        return f"<SharedVariables {sorted(self._vars)}>"
