"""Quire environment package: configuration, loading and error types.

Import order matters: exceptions, loaders and the shared store have no
dependency on Template, so they load before ``core``.

"""

from quire.environment.exceptions import (
    BlockNameError,
    BlockStackError,
    ErrorCode,
    ExtendsCycleError,
    SandboxViolationError,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
)
from quire.environment.loaders import DictLoader, FileSystemLoader, Loader
from quire.environment.shared import SharedVariables
from quire.environment.core import Environment

__all__ = [
    "BlockNameError",
    "BlockStackError",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "ExtendsCycleError",
    "FileSystemLoader",
    "Loader",
    "SandboxViolationError",
    "SharedVariables",
    "SourceSnippet",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "build_source_snippet",
]
