"""Template loaders for the Quire environment.

Loaders turn a template name into a location and a location into source
text. They implement the Loader protocol:

    ```python
    class DatabaseLoader:
        def resolve(self, name: str) -> str:
            return f"db://{name}"

        def exists(self, location: str) -> bool:
            return db.exists(location.removeprefix("db://"))

        def load(self, location: str) -> str:
            row = db.query("SELECT source FROM templates WHERE name = ?", location[5:])
            if not row:
                raise TemplateNotFoundError(f"Template '{location}' not found")
            return row.source

        def list_templates(self) -> list[str]:
            return [r.name for r in db.query("SELECT name FROM templates")]
    ```

Built-in Loaders:
- `FileSystemLoader`: Load from filesystem directories
- `DictLoader`: Load from an in-memory dictionary (testing/embedded)

Loaders only read. No loader ever writes back to a template's source.

"""

from __future__ import annotations

from collections.abc import Iterable
from difflib import get_close_matches
from pathlib import Path
from typing import Protocol, runtime_checkable

from quire.environment.exceptions import TemplateNotFoundError


@runtime_checkable
class Loader(Protocol):
    """Protocol every loader satisfies."""

    def resolve(self, name: str) -> str: ...

    def exists(self, location: str) -> bool: ...

    def load(self, location: str) -> str: ...

    def list_templates(self) -> list[str]: ...


class FileSystemLoader:
    """Load templates from filesystem directories.

    Searches one or more directories for a template by name. The first
    directory containing the file wins; when none does, the name resolves
    against the first directory so the miss is reported with a concrete path.

    Search Order:
        ```python
        loader = FileSystemLoader(["themes/custom/", "themes/default/"])
        # Looks in themes/custom/ first, then themes/default/
        ```

    Example:
            >>> loader = FileSystemLoader("templates/")
            >>> loader.resolve("pages/about.tpl")
            'templates/pages/about.tpl'

    """

    __slots__ = ("_encoding", "_extensions", "_paths")

    def __init__(
        self,
        paths: str | Path | Iterable[str | Path] = ".",
        encoding: str = "utf-8",
        extensions: tuple[str, ...] = (".tpl",),
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding
        self._extensions = extensions

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    def resolve(self, name: str) -> str:
        """Return the location of the first matching file."""
        for base in self._paths:
            path = base / name
            if path.is_file():
                return str(path)
        return str(self._paths[0] / name)

    def exists(self, location: str) -> bool:
        return Path(location).is_file()

    def load(self, location: str) -> str:
        """Read template source from disk."""
        path = Path(location)
        if not path.is_file():
            raise TemplateNotFoundError(
                f"Could not render. The file {location} could not be found",
                template_name=location,
            )
        return path.read_text(self._encoding)

    def list_templates(self) -> list[str]:
        """List template names (relative paths) across all search paths."""
        templates = set()
        for base in self._paths:
            if base.is_dir():
                for ext in self._extensions:
                    for path in base.rglob(f"*{ext}"):
                        templates.add(path.relative_to(base).as_posix())
        return sorted(templates)


class DictLoader:
    """Load templates from an in-memory dictionary.

    Maps template names to source strings. Locations are the names
    themselves. Useful for testing and embedded templates.

    Example:
            >>> loader = DictLoader({
            ...     "layout": "emit('<main>', blocks['content'], '</main>')",
            ...     "page": "extend('layout')\\nemit('Hi')",
            ... })
            >>> Environment(loader=loader).render("page")
            '<main>Hi</main>'

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: dict[str, str]):
        self._mapping = mapping

    def resolve(self, name: str) -> str:
        return name

    def exists(self, location: str) -> bool:
        return location in self._mapping

    def load(self, location: str) -> str:
        if location not in self._mapping:
            available = sorted(self._mapping)
            msg = f"Template '{location}' not found"
            matches = get_close_matches(location, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
            raise TemplateNotFoundError(msg, template_name=location)
        return self._mapping[location]

    def list_templates(self) -> list[str]:
        return sorted(self._mapping)


__all__ = ["DictLoader", "FileSystemLoader", "Loader"]
