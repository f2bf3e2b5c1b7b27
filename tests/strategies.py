"""Shared hypothesis strategies for Quire property-based testing.

Provides reusable strategies for the block stack:

- **Text**: Fragments safe to embed in template bodies
- **Names**: Block identifiers
- **Programs**: Random sequences of emit/begin/end operations that keep
  the stack balanced

These are building blocks -- individual test modules compose them into
property-specific strategies.
"""

from __future__ import annotations

from hypothesis import strategies as st

# ---------------------------------------------------------------------------
# Text strategies
# ---------------------------------------------------------------------------

# Printable text without surrogates or NULs
fragment = st.text(
    alphabet=st.characters(
        blacklist_categories=("Cs",),
        blacklist_characters="\x00",
    ),
    min_size=1,
    max_size=30,
)

fragments = st.lists(fragment, min_size=0, max_size=8)

# ---------------------------------------------------------------------------
# Name strategies
# ---------------------------------------------------------------------------

block_name = st.from_regex(r"[a-z][a-z0-9_]{0,10}", fullmatch=True).filter(
    lambda name: name != "content"
)

distinct_block_names = st.lists(block_name, min_size=1, max_size=5, unique=True)

# ---------------------------------------------------------------------------
# Capture programs
# ---------------------------------------------------------------------------


@st.composite
def capture_program(draw, max_ops: int = 20) -> list[tuple[str, str | None]]:
    """A balanced sequence of ("emit", text), ("begin", name) and ("end", None).

    Every "begin" is matched by a later "end".
    """
    ops: list[tuple[str, str | None]] = []
    depth = 0
    for _ in range(draw(st.integers(min_value=0, max_value=max_ops))):
        choices = ["emit", "begin"] + (["end"] if depth else [])
        op = draw(st.sampled_from(choices))
        if op == "emit":
            ops.append(("emit", draw(fragment)))
        elif op == "begin":
            ops.append(("begin", draw(st.one_of(st.none(), block_name))))
            depth += 1
        else:
            ops.append(("end", None))
            depth -= 1
    ops.extend(("end", None) for _ in range(depth))
    return ops


# Transformations safe for filter idempotence checks
idempotent_filter = st.sampled_from([str.strip, str.upper, str.lower, str.casefold])
