"""Tests for Environment, loaders and the shared variable store."""

import pytest

from quire import (
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    Loader,
    PythonExecutor,
    SandboxPolicy,
    SharedVariables,
    Template,
    TemplateNotFoundError,
)


class TestEnvironment:
    """Configuration and template construction."""

    def test_get_template_is_fresh(self, env_with_loader):
        first = env_with_loader.get_template("child")
        second = env_with_loader.get_template("child")
        assert isinstance(first, Template)
        assert first is not second
        assert first.environment is env_with_loader

    def test_render_shortcut(self, env_with_loader):
        assert env_with_loader.render("partial") == "<p>Partial content</p>"

    def test_resolve_without_loader(self, env):
        assert env.resolve_path("pages/a.tpl") == "pages/a.tpl"

    def test_load_source_without_loader_reads_disk(self, env, tmp_path):
        path = tmp_path / "page.tpl"
        path.write_text('emit("disk")')
        assert env.render(str(path)) == "disk"

    def test_globals_are_shared(self):
        env = Environment(globals={"site": "S"})
        assert env.shared.site == "S"
        assert env.globals is env.shared
        assert env.get_template("x").shared is env.shared

    def test_default_executor(self, env):
        assert isinstance(env.executor, PythonExecutor)

    def test_policy_reaches_executor(self):
        policy = SandboxPolicy(allow_imports=True)
        env = Environment(policy=policy)
        assert env.executor.policy is policy

    def test_executor_and_policy_exclusive(self):
        with pytest.raises(ValueError):
            Environment(executor=PythonExecutor(), policy=SandboxPolicy())

    def test_invalid_depth(self):
        with pytest.raises(ValueError):
            Environment(max_extends_depth=0)

    def test_list_templates(self, env_with_loader, env):
        assert env_with_loader.list_templates() == ["base", "child", "partial"]
        assert env.list_templates() == []

    def test_custom_executor(self):
        class UpperExecutor:
            def execute(self, source, location, variables, template):
                template.emit(source.upper())

        env = Environment(DictLoader({"t": "shout"}), executor=UpperExecutor())
        assert env.render("t") == "SHOUT"


class TestFileSystemLoader:
    """Loading from directories."""

    def test_first_path_wins(self, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        (first / "page.tpl").write_text('emit("first")')
        (second / "page.tpl").write_text('emit("second")')
        (second / "only.tpl").write_text('emit("only")')
        env = Environment(loader=FileSystemLoader([first, second]))
        assert env.render("page.tpl") == "first"
        assert env.render("only.tpl") == "only"

    def test_missing_resolves_against_first_path(self, tmp_path):
        loader = FileSystemLoader(tmp_path)
        location = loader.resolve("missing.tpl")
        assert location == str(tmp_path / "missing.tpl")
        assert not loader.exists(location)
        with pytest.raises(TemplateNotFoundError) as exc_info:
            loader.load(location)
        assert exc_info.value.code == ErrorCode.SOURCE_NOT_FOUND
        assert "could not be found" in str(exc_info.value)

    def test_list_templates_filters_extensions(self, make_env):
        env = make_env({"a.tpl": "", "sub/b.tpl": "", "notes.txt": ""})
        assert env.list_templates() == ["a.tpl", "sub/b.tpl"]

    def test_is_loader(self, tmp_path):
        assert isinstance(FileSystemLoader(tmp_path), Loader)


class TestDictLoader:
    """In-memory sources."""

    def test_did_you_mean(self):
        loader = DictLoader({"layout": ""})
        with pytest.raises(TemplateNotFoundError, match="Did you mean 'layout'"):
            loader.load("layuot")

    def test_available_listing(self):
        loader = DictLoader({"a": "", "b": ""})
        with pytest.raises(TemplateNotFoundError, match="Available: a, b"):
            loader.load("zzzzzz")

    def test_is_loader(self):
        assert isinstance(DictLoader({}), Loader)


class TestSharedVariables:
    """Attribute and item access over one store."""

    def test_attribute_access(self):
        shared = SharedVariables()
        shared.title = "Home"
        assert shared.title == "Home"
        assert "title" in shared
        del shared.title
        assert "title" not in shared

    def test_item_access(self):
        shared = SharedVariables({"a": 1})
        shared["b"] = 2
        assert shared["a"] == 1
        assert dict(shared.items()) == {"a": 1, "b": 2}
        del shared["a"]
        assert list(shared) == ["b"]

    def test_missing_attribute(self):
        with pytest.raises(AttributeError):
            SharedVariables().missing
        with pytest.raises(AttributeError):
            del SharedVariables().missing

    def test_get_and_update(self):
        shared = SharedVariables()
        shared.update({"x": 1, "y": 2})
        assert shared.get("x") == 1
        assert shared.get("z", "d") == "d"
        assert len(shared) == 2

    def test_copy_is_detached(self):
        shared = SharedVariables({"x": 1})
        snapshot = shared.copy()
        shared.x = 2
        assert snapshot == {"x": 1}
