"""Quire: block-based template composition for Python.

A template body is a Python script. It writes text with ``emit``, wraps
regions of that text in named blocks, and may extend a parent template
that places those blocks into its own layout.

Quickstart:
    >>> from quire import DictLoader, Environment
    >>> env = Environment(loader=DictLoader({
    ...     "layout": "emit('<title>', blocks['title'], '</title>', blocks['content'])",
    ...     "page": "extend('layout')\\nblock('title', 'Home')\\nemit('<p>Hi</p>')",
    ... }))
    >>> env.render("page")
    '<title>Home</title><p>Hi</p>'

File-based templates:
    >>> env = Environment(loader=FileSystemLoader("templates/"))
    >>> env.render("pages/about.tpl", user=user)

Architecture:
Template body → PythonExecutor (validate, compile, exec) → CaptureContext
→ Blocks → BlockRegistry → "content" merge → parent Template

Pipeline stages:
1. **Sandbox**: The body is parsed and checked against a SandboxPolicy
2. **Capture**: Emitted text flows into the root block and every open block
3. **Registry**: Closed named blocks are stored, last write wins
4. **Inheritance**: The child's blocks replace its parent's, which renders next

Thread-Safety:
Templates are single-use per render request. The extends chain of a render
lives in a ContextVar, so concurrent renders do not see each other.

"""

from quire.block import ABSENT, Block

# environment first: its core module pulls in template.core and capture
from quire.environment import (
    BlockNameError,
    BlockStackError,
    DictLoader,
    Environment,
    ErrorCode,
    ExtendsCycleError,
    FileSystemLoader,
    Loader,
    SandboxViolationError,
    SharedVariables,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
)
from quire.capture import CaptureContext
from quire.render_context import RenderContext, get_render_context, render_context
from quire.sandbox import DEFAULT_POLICY, PythonExecutor, SandboxPolicy, ScriptExecutor
from quire.template import CONTENT_BLOCK, BlockRegistry, Template

__version__ = "0.1.0"

__all__ = [
    "ABSENT",
    "CONTENT_BLOCK",
    "DEFAULT_POLICY",
    "Block",
    "BlockNameError",
    "BlockRegistry",
    "BlockStackError",
    "CaptureContext",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "ExtendsCycleError",
    "FileSystemLoader",
    "Loader",
    "PythonExecutor",
    "RenderContext",
    "SandboxPolicy",
    "SandboxViolationError",
    "ScriptExecutor",
    "SharedVariables",
    "SourceSnippet",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "__version__",
    "build_source_snippet",
    "get_render_context",
    "render_context",
]
