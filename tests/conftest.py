"""Pytest configuration and fixtures for Quire tests."""

import pytest

from quire import DictLoader, Environment, FileSystemLoader


@pytest.fixture
def env():
    """Create a basic Quire Environment with no loader."""
    return Environment()


@pytest.fixture
def env_with_loader():
    """Create a Quire Environment with DictLoader and test templates."""
    loader = DictLoader(
        {
            "base": (
                "emit('<html><head>', blocks['head'], '</head>')\n"
                "emit('<body>', blocks['content'], '</body></html>')\n"
            ),
            "child": (
                "extend('base')\n"
                "block('head', '<title>Child</title>')\n"
                "emit('Hello World')\n"
            ),
            "partial": "emit('<p>Partial content</p>')",
        }
    )
    return Environment(loader=loader)


@pytest.fixture
def make_env(tmp_path):
    """Write templates to a temporary directory and return an Environment over it."""

    def _make(templates: dict[str, str], **kwargs) -> Environment:
        for name, source in templates.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source)
        return Environment(loader=FileSystemLoader(str(tmp_path)), **kwargs)

    return _make


def dict_env(templates: dict[str, str], **kwargs) -> Environment:
    """Build an Environment over in-memory templates."""
    return Environment(loader=DictLoader(templates), **kwargs)

