"""Tests for CaptureContext, the block stack a template body writes into."""

import pytest
from hypothesis import given, settings

from quire import Block, BlockStackError, CaptureContext, ErrorCode

from .strategies import capture_program, fragments, idempotent_filter


def run_program(ctx: CaptureContext, ops) -> list[tuple[Block, str]]:
    """Run a capture program, returning each closed block with its expected text."""
    closed: list[tuple[Block, str]] = []
    # Text each open block should hold, innermost last
    expected: list[list[str]] = []
    for op, arg in ops:
        if op == "emit":
            ctx.emit(arg)
            for parts in expected:
                parts.append(arg)
        elif op == "begin":
            ctx.begin(arg)
            expected.append([])
        else:
            block = ctx.end()
            closed.append((block, "".join(expected.pop())))
    ctx.close()
    return closed


class TestCaptureBasics:
    """Flushing and propagation."""

    def test_worked_example(self):
        """emit A, open x, emit B, close x, emit C."""
        ctx = CaptureContext()
        ctx.emit("A")
        ctx.begin("x")
        ctx.emit("B")
        x = ctx.end()
        ctx.emit("C")
        ctx.close()
        assert str(x) == "B"
        assert str(ctx.root) == "ABC"

    def test_nesting_visibility(self):
        """Text emitted inside inner reaches inner, outer and root."""
        ctx = CaptureContext()
        outer = ctx.begin("outer")
        ctx.emit("1")
        inner = ctx.begin("inner")
        ctx.emit("2")
        ctx.end()
        ctx.emit("3")
        ctx.end()
        ctx.close()
        assert str(inner) == "2"
        assert str(outer) == "123"
        assert str(ctx.root) == "123"

    def test_text_before_begin_not_in_block(self):
        ctx = CaptureContext()
        ctx.emit("before")
        block = ctx.begin("b")
        ctx.emit("inside")
        ctx.end()
        assert str(block) == "inside"

    def test_emit_stringifies(self):
        ctx = CaptureContext()
        ctx.emit(42)
        ctx.emit(Block(content="!"))
        ctx.close()
        assert str(ctx.root) == "42!"

    def test_state_introspection(self):
        ctx = CaptureContext()
        assert ctx.depth == 0
        assert not ctx.is_capturing
        ctx.begin("a")
        ctx.begin()
        assert ctx.depth == 2
        assert ctx.is_capturing
        assert ctx.open_names() == ["a", None]

    def test_reset_discards_frames_and_pending(self):
        ctx = CaptureContext()
        ctx.begin("a")
        ctx.emit("lost")
        ctx.reset()
        ctx.close()
        assert ctx.depth == 0
        assert str(ctx.root) == ""


class TestCaptureErrors:
    """Stack misuse."""

    def test_end_on_empty_stack(self):
        ctx = CaptureContext()
        with pytest.raises(BlockStackError) as exc_info:
            ctx.end()
        assert exc_info.value.code == ErrorCode.EMPTY_STACK

    def test_close_with_open_blocks(self):
        ctx = CaptureContext()
        ctx.begin("sidebar")
        ctx.begin()
        with pytest.raises(BlockStackError) as exc_info:
            ctx.close()
        assert exc_info.value.code == ErrorCode.UNCLOSED_BLOCK
        assert "'sidebar'" in str(exc_info.value)
        assert "<anonymous>" in str(exc_info.value)


class TestCaptureFilters:
    """end(filter) and end_recursive(filter)."""

    def test_filter_applies_to_block_only(self):
        ctx = CaptureContext()
        outer = ctx.begin("outer")
        ctx.begin("inner")
        ctx.emit("hi")
        inner = ctx.end(str.upper)
        ctx.end()
        ctx.close()
        assert str(inner) == "HI"
        assert str(outer) == "hi"
        assert str(ctx.root) == "hi"

    def test_recursive_filter_reaches_every_ancestor(self):
        ctx = CaptureContext()
        ctx.emit("a")
        outer = ctx.begin("outer")
        ctx.emit("b")
        ctx.begin("inner")
        ctx.emit("c")
        inner = ctx.end_recursive(str.upper)
        ctx.emit("d")
        ctx.end()
        ctx.emit("e")
        ctx.close()
        assert str(inner) == "C"
        assert str(outer) == "bCd"
        assert str(ctx.root) == "abCde"

    def test_recursive_filter_result_appears_once(self):
        ctx = CaptureContext()
        ctx.begin("x")
        ctx.emit("abc")
        ctx.end_recursive(lambda text: text * 2)
        ctx.close()
        assert str(ctx.root) == "abcabc"

    def test_filter_result_is_stringified(self):
        ctx = CaptureContext()
        ctx.begin("n")
        ctx.emit("12")
        block = ctx.end(int)
        assert block.get_content() == "12"


class TestSilentCapture:
    """Blocks that keep their text out of the surrounding output."""

    def test_silent_block_withdrawn_from_root(self):
        ctx = CaptureContext()
        ctx.emit("A")
        block = ctx.begin("meta", silent=True)
        ctx.emit("B")
        ctx.end()
        ctx.emit("C")
        ctx.close()
        assert str(block) == "B"
        assert str(ctx.root) == "AC"

    def test_silent_block_withdrawn_from_open_ancestors(self):
        ctx = CaptureContext()
        outer = ctx.begin("outer")
        ctx.emit("1")
        ctx.begin("hidden", silent=True)
        ctx.emit("2")
        ctx.end()
        ctx.emit("3")
        ctx.end()
        ctx.close()
        assert str(outer) == "13"

    def test_silent_recursive_keeps_filtered_text_in_block(self):
        ctx = CaptureContext()
        ctx.begin("x", silent=True)
        ctx.emit("abc")
        block = ctx.end_recursive(str.upper)
        ctx.close()
        assert str(block) == "ABC"
        assert str(ctx.root) == ""


class TestCaptureProperties:
    """Invariants over random balanced programs."""

    @given(ops=capture_program())
    @settings(max_examples=200)
    def test_every_fragment_reaches_root_once(self, ops):
        ctx = CaptureContext()
        run_program(ctx, ops)
        emitted = "".join(arg for op, arg in ops if op == "emit")
        assert str(ctx.root) == emitted

    @given(ops=capture_program())
    @settings(max_examples=200)
    def test_closed_block_holds_text_between_push_and_pop(self, ops):
        ctx = CaptureContext()
        for block, expected in run_program(ctx, ops):
            assert str(block) == expected

    @given(parts=fragments, text_filter=idempotent_filter)
    @settings(max_examples=200)
    def test_block_filter_idempotent(self, parts, text_filter):
        """Filtering an already-filtered block changes nothing."""
        once = CaptureContext()
        once.begin("x")
        for part in parts:
            once.emit(part)
        first = once.end(text_filter)

        twice = CaptureContext()
        twice.begin("x")
        twice.emit(first.get_content())
        second = twice.end(text_filter)
        assert second == first

    @given(prefix=fragments, body=fragments, suffix=fragments)
    @settings(max_examples=200)
    def test_recursive_filter_root_view(self, prefix, body, suffix):
        ctx = CaptureContext()
        for part in prefix:
            ctx.emit(part)
        ctx.begin("x")
        for part in body:
            ctx.emit(part)
        ctx.end_recursive(str.upper)
        for part in suffix:
            ctx.emit(part)
        ctx.close()
        expected = "".join(prefix) + "".join(body).upper() + "".join(suffix)
        assert str(ctx.root) == expected
