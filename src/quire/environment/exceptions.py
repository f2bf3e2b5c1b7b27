"""Exceptions for the Quire template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError     # Source location does not exist
├── BlockStackError           # end_block() with nothing open, or blocks left open
├── BlockNameError            # Direct value assignment without a block name
├── ExtendsCycleError         # Inheritance chain loops back or runs too deep
├── TemplateSyntaxError       # Template body is not valid Python
├── SandboxViolationError     # Template body uses a forbidden construct
└── TemplateRuntimeError      # Template body raised while executing

Error Messages:
Every exception carries an ErrorCode and can render itself with
``format_compact()``: code, message, location, source snippet and a
documentation link.

Example:
    ```
    Q-SBX-001: Forbidden name 'eval' in page.tpl:3
       |
       2 | emit("<p>")
    >  3 | emit(eval(user_input))
       |
      Docs: docs/errors.md#q-sbx-001
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from quire.environment import terminal

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

# Error reference shipped in the repository
_QUIRE_DOCS_BASE = "docs/errors.md"


class ErrorCode(Enum):
    """Searchable error codes for Quire errors.

    Format: Q-{CATEGORY}-{NUMBER}
    Categories: TPL (template loading/inheritance), BLK (block stack),
    SBX (sandbox), RUN (runtime)
    """

    # Template loading and inheritance (Q-TPL-xxx)
    SOURCE_NOT_FOUND = "Q-TPL-001"
    EXTENDS_CYCLE = "Q-TPL-002"
    EXTENDS_DEPTH = "Q-TPL-003"
    SYNTAX_ERROR = "Q-TPL-004"

    # Block stack (Q-BLK-xxx)
    EMPTY_STACK = "Q-BLK-001"
    MISSING_NAME = "Q-BLK-002"
    UNCLOSED_BLOCK = "Q-BLK-003"

    # Sandbox (Q-SBX-xxx)
    SANDBOX_VIOLATION = "Q-SBX-001"

    # Runtime (Q-RUN-xxx)
    RUNTIME_ERROR = "Q-RUN-001"

    @property
    def docs_url(self) -> str:
        """Link to this code's section of the error reference."""
        return f"{_QUIRE_DOCS_BASE}#{self.value.lower()}"

    @property
    def category(self) -> str:
        """Error category (e.g., 'template', 'block', 'sandbox', 'runtime')."""
        prefix = self.value.split("-")[1]
        return {
            "TPL": "template",
            "BLK": "block",
            "SBX": "sandbox",
            "RUN": "runtime",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


def format_template_stack(stack: list[str] | None) -> str:
    """Format the extends chain for error messages.

    Example:
        >>> print(format_template_stack(["page.tpl", "layout.tpl"]))
        Extends chain:
          • page.tpl
          • layout.tpl
    """
    if not stack:
        return ""
    lines = [terminal.style("Extends chain:", "dim")]
    for name in stack:
        lines.append(f"  • {terminal.style(name, 'location')}")
    return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format the snippet with line numbers, highlighting the error line."""
        parts: list[str] = [terminal.style("   |", "dim")]
        for lineno, content in self.lines:
            parts.append(
                terminal.format_source_line(lineno, content, is_error=lineno == self.error_line)
            )
        if self.column is not None:
            caret = " " * self.column + "^"
            parts.append(f"{terminal.style('   |', 'dim')} {terminal.style(caret, 'error')}")
        parts.append(terminal.style("   |", "dim"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all Quire errors.

    Enables broad exception handling:

        >>> try:
        ...     template.render()
        ... except TemplateError as e:
        ...     log.error(e.format_compact())

    Attributes:
        code: ErrorCode for searchable, documentable error identification.
    """

    code: ErrorCode | None = None

    def __init__(
        self,
        message: str,
        *,
        template_name: str | None = None,
        lineno: int | None = None,
        source_snippet: SourceSnippet | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.template_name = template_name
        self.lineno = lineno
        self.source_snippet = source_snippet
        if code is not None:
            self.code = code
        super().__init__(message)

    @property
    def location(self) -> str | None:
        if not self.template_name and not self.lineno:
            return None
        loc = self.template_name or "<template>"
        if self.lineno:
            loc += f":{self.lineno}"
        return loc

    def format_compact(self) -> str:
        """Format error as a structured, human-readable summary.

        Format::

            Q-BLK-001: end_block() called with no open block
              Location: page.tpl:7
               |
            >  7 | endblock()
               |
              Docs: docs/errors.md#q-blk-001
        """
        parts = [terminal.format_error_header(self.code.value if self.code else None, self.message)]
        if self.location:
            parts.append(f"  Location: {terminal.style(self.location, 'location')}")
        if self.source_snippet:
            parts.append(self.source_snippet.format())
        if self.code:
            parts.append(f"  {terminal.style('Docs:', 'dim')} {terminal.style(self.code.docs_url, 'url')}")
        return "\n".join(parts)


class TemplateNotFoundError(TemplateError):
    """Render requested for a source location that does not exist.

    Example:
            >>> Template("missing.tpl").render()
        TemplateNotFoundError: Could not render. The file missing.tpl could not be found
    """

    code: ErrorCode | None = ErrorCode.SOURCE_NOT_FOUND


class BlockStackError(TemplateError):
    """Block stack misuse: closing with nothing open, or leaving blocks open.

    Carries ``ErrorCode.EMPTY_STACK`` or ``ErrorCode.UNCLOSED_BLOCK``.
    """

    code: ErrorCode | None = ErrorCode.EMPTY_STACK


class BlockNameError(TemplateError):
    """A block value was assigned without a block name."""

    code: ErrorCode | None = ErrorCode.MISSING_NAME


class ExtendsCycleError(TemplateError):
    """Inheritance chain revisits a template or exceeds the depth limit.

    Attributes:
        chain: Locations rendered in the chain so far, outermost child first.
    """

    code: ErrorCode | None = ErrorCode.EXTENDS_CYCLE

    def __init__(self, message: str, *, chain: list[str] | None = None, **kwargs: Any):
        self.chain = list(chain or [])
        super().__init__(message, **kwargs)

    def format_compact(self) -> str:
        text = super().format_compact()
        if self.chain:
            text += "\n" + format_template_stack(self.chain)
        return text


class SandboxViolationError(TemplateError):
    """Template body uses a construct the sandbox policy forbids.

    Raised before any part of the body executes.

    Attributes:
        construct: The offending name, attribute or statement.
    """

    code: ErrorCode | None = ErrorCode.SANDBOX_VIOLATION

    def __init__(self, message: str, *, construct: str | None = None, **kwargs: Any):
        self.construct = construct
        super().__init__(message, **kwargs)


class TemplateRuntimeError(TemplateError):
    """Template body raised while executing.

    The original exception is chained as ``__cause__``.
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR


class TemplateSyntaxError(TemplateError):
    """Template body failed to parse.

    The parser's SyntaxError is chained as ``__cause__``.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR
