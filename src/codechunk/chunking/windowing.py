"""
Windowing engine.

Top-level syntax nodes are packed greedily into windows bounded by a
non-whitespace (NWS) character budget. Oversized nodes are split along their
children, oversized leaves along line boundaries, and adjacent small windows
are merged afterwards. NWS sizes come from a prefix-sum index, so any range
costs O(1).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from itertools import accumulate
from typing import Iterator, List, Optional, Sequence

from tree_sitter import Node

from ..models import ByteRange, LineRange
from .nodes import is_leaf, iter_children

_TRAILING_NEWLINES = b"\r\n"
_WHITESPACE = " \t\n\r"
_WHITESPACE_BYTES = frozenset(_WHITESPACE.encode("ascii"))


def _counts_as_nws(byte: int) -> bool:
    # UTF-8 continuation bytes belong to a character already counted.
    return byte not in _WHITESPACE_BYTES and (byte & 0xC0) != 0x80


def count_nws(text: str | bytes) -> int:
    """Number of non-whitespace characters in ``text``."""
    if isinstance(text, str):
        return sum(1 for char in text if char not in _WHITESPACE)
    return sum(1 for byte in text if _counts_as_nws(byte))


class NwsIndex:
    """Prefix sums of NWS characters over a byte buffer."""

    def __init__(self, code: bytes) -> None:
        self._cumsum = list(accumulate((1 if _counts_as_nws(b) else 0 for b in code), initial=0))

    def size(self, start: int, end: int) -> int:
        end = min(end, len(self._cumsum) - 1)
        start = max(start, 0)
        if end <= start:
            return 0
        return self._cumsum[end] - self._cumsum[start]

    def node_size(self, node: Node) -> int:
        return self.size(node.start_byte, node.end_byte)


@dataclass
class Window:
    """
    Nodes destined for one chunk.

    ``spans`` holds the byte span each member contributes; for whole nodes it
    is the node's range, for line-split pieces of an oversized leaf it is the
    piece's own range. ``line_ranges`` is only populated while every member
    is such a piece.
    """

    nodes: List[Node] = field(default_factory=list)
    spans: List[ByteRange] = field(default_factory=list)
    size: int = 0
    is_partial: bool = False
    line_ranges: List[LineRange] = field(default_factory=list)

    def add(self, node: Node, size: int) -> None:
        self.nodes.append(node)
        self.spans.append(ByteRange(node.start_byte, node.end_byte))
        self.size += size

    @classmethod
    def of(cls, node: Node, size: int) -> "Window":
        window = cls()
        window.add(node, size)
        return window

    def __bool__(self) -> bool:
        return bool(self.nodes)


@dataclass
class RebuiltText:
    text: str
    byte_range: ByteRange
    line_range: LineRange


def _trim_trailing_newlines(code: bytes, start: int, end: int) -> int:
    while end > start and code[end - 1] in _TRAILING_NEWLINES:
        end -= 1
    return end


def line_range_for(code: bytes, start: int, end: int) -> LineRange:
    """Inclusive line range of ``code[start:end]`` with trailing newlines trimmed."""
    end = _trim_trailing_newlines(code, start, end)
    start_line = code.count(b"\n", 0, start)
    return LineRange(start_line, start_line + code.count(b"\n", start, end))


def split_leaf_by_lines(node: Node, code: bytes, max_size: int) -> List[Window]:
    """Cut an oversized leaf into line-aligned partial windows."""
    windows: List[Window] = []
    start = node.start_byte
    end = min(node.end_byte, len(code))

    piece_start = start
    piece_size = 0
    cursor = start

    def flush(piece_end: int) -> None:
        windows.append(
            Window(
                nodes=[node],
                spans=[ByteRange(piece_start, piece_end)],
                size=piece_size,
                is_partial=True,
                line_ranges=[line_range_for(code, piece_start, piece_end)],
            )
        )

    while cursor < end:
        newline = code.find(b"\n", cursor, end)
        line_end = end if newline == -1 else newline + 1
        line_size = count_nws(code[cursor:line_end])

        if piece_size + line_size > max_size and cursor > piece_start:
            flush(cursor)
            piece_start = cursor
            piece_size = 0

        piece_size += line_size
        cursor = line_end

    if cursor > piece_start:
        flush(cursor)
    return windows


def _children(node: Node) -> List[Node]:
    return list(iter_children(node))


def greedy_assign_windows(
    nodes: Sequence[Node], code: bytes, nws: NwsIndex, max_size: int
) -> List[Window]:
    """
    Pack ``nodes`` into windows whose NWS size stays within ``max_size``.

    A node that alone exceeds the budget flushes the current window and is
    packed through its children (or split by lines when it is a leaf). The
    descent uses an explicit stack of (child iterator, open window) levels.
    """
    windows: List[Window] = []
    levels: List[tuple[Iterator[Node], Window]] = [(iter(nodes), Window())]

    while levels:
        siblings, current = levels[-1]
        node: Optional[Node] = next(siblings, None)
        if node is None:
            levels.pop()
            if current:
                windows.append(current)
            continue

        size = nws.node_size(node)
        if current.size + size <= max_size:
            current.add(node, size)
        elif size > max_size:
            if current:
                windows.append(current)
                levels[-1] = (siblings, Window())
            if not is_leaf(node):
                levels.append((iter(_children(node)), Window()))
            else:
                windows.extend(split_leaf_by_lines(node, code, max_size))
        else:
            if current:
                windows.append(current)
            levels[-1] = (siblings, Window.of(node, size))

    return windows


def merge_adjacent_windows(windows: Sequence[Window], max_size: int) -> List[Window]:
    """Single left-to-right pass joining neighbours while the budget allows."""
    if not windows:
        return []

    merged: List[Window] = []
    current = windows[0]
    for following in windows[1:]:
        if current.size + following.size <= max_size:
            both_split = bool(current.line_ranges) and bool(following.line_ranges)
            current = Window(
                nodes=current.nodes + following.nodes,
                spans=current.spans + following.spans,
                size=current.size + following.size,
                is_partial=current.is_partial or following.is_partial,
                line_ranges=current.line_ranges + following.line_ranges if both_split else [],
            )
        else:
            merged.append(current)
            current = following
    merged.append(current)
    return merged


def rebuild_text(window: Window, code: bytes) -> RebuiltText:
    """Slice the source covered by ``window`` and compute its ranges."""
    if not window.spans:
        return RebuiltText("", ByteRange(0, 0), LineRange(0, 0))

    start = max(min(span.start for span in window.spans), 0)
    end = min(max(span.end for span in window.spans), len(code))
    end = _trim_trailing_newlines(code, start, end)

    if window.line_ranges:
        line_range = LineRange(window.line_ranges[0].start, window.line_ranges[-1].end)
    else:
        line_range = line_range_for(code, start, end)

    return RebuiltText(
        text=code[start:end].decode("utf-8", errors="replace"),
        byte_range=ByteRange(start, end),
        line_range=line_range,
    )


def build_windows(root: Node, code: bytes, max_size: int) -> List[Window]:
    """
    Pack and merge the root's children into the final ordered windows.

    Windows holding nothing but whitespace are dropped.
    """
    nws = NwsIndex(code)
    raw = greedy_assign_windows(_children(root), code, nws, max_size)
    return [window for window in merge_adjacent_windows(raw, max_size) if window.size > 0]
