from codechunk.chunking.windowing import (
    NwsIndex,
    Window,
    build_windows,
    count_nws,
    greedy_assign_windows,
    merge_adjacent_windows,
    rebuild_text,
    split_leaf_by_lines,
)
from codechunk.models import ByteRange, LineRange

CODE = b"aaaa\nbbbb\ncccc\n"


def _line_nodes(fake_node):
    return [
        fake_node("line", 0, 4),
        fake_node("line", 5, 9),
        fake_node("line", 10, 14),
    ]


def _texts(windows, code=CODE):
    return [rebuild_text(window, code).text for window in windows]


def test_count_nws_ignores_whitespace() -> None:
    assert count_nws("a b\n\tc\r\n") == 3
    assert count_nws(b"  x  ") == 1


def test_count_nws_counts_characters_not_utf8_bytes() -> None:
    assert count_nws("é€".encode("utf-8")) == 2
    assert NwsIndex("é €".encode("utf-8")).size(0, 6) == 2


def test_count_nws_counts_control_characters_other_than_line_whitespace() -> None:
    text = "a\x0cb\x0bc"
    assert count_nws(text) == 5
    assert count_nws(text.encode("utf-8")) == count_nws(text)
    assert NwsIndex(text.encode("utf-8")).size(0, len(text)) == 5


def test_nws_index_ranges() -> None:
    index = NwsIndex(CODE)
    assert index.size(0, len(CODE)) == 12
    assert index.size(4, 5) == 0
    assert index.size(5, 4) == 0
    assert index.size(0, 1000) == 12


def test_greedy_packs_until_budget(fake_node) -> None:
    nodes = _line_nodes(fake_node)
    windows = greedy_assign_windows(nodes, CODE, NwsIndex(CODE), max_size=8)
    assert [window.size for window in windows] == [8, 4]
    assert _texts(windows) == ["aaaa\nbbbb", "cccc"]


def test_everything_fits_in_one_window(fake_node) -> None:
    windows = greedy_assign_windows(_line_nodes(fake_node), CODE, NwsIndex(CODE), 100)
    assert len(windows) == 1
    rebuilt = rebuild_text(windows[0], CODE)
    assert rebuilt.byte_range == ByteRange(0, 14)
    assert rebuilt.line_range == LineRange(0, 2)


def test_oversized_node_is_split_along_children(fake_node) -> None:
    block = fake_node("block", 0, 14, children=_line_nodes(fake_node))
    windows = greedy_assign_windows([block], CODE, NwsIndex(CODE), max_size=5)
    assert _texts(windows) == ["aaaa", "bbbb", "cccc"]
    assert not any(window.is_partial for window in windows)


def test_oversized_leaf_is_split_by_lines(fake_node) -> None:
    leaf = fake_node("string", 0, 15)
    windows = split_leaf_by_lines(leaf, CODE, max_size=8)
    assert len(windows) == 2
    assert all(window.is_partial for window in windows)
    assert windows[0].spans == [ByteRange(0, 10)]
    assert windows[0].line_ranges == [LineRange(0, 1)]

    second = rebuild_text(windows[1], CODE)
    assert second.text == "cccc"
    assert second.byte_range == ByteRange(10, 14)
    assert second.line_range == LineRange(2, 2)


def test_single_long_line_still_produces_a_window(fake_node) -> None:
    code = b"x" * 40
    windows = split_leaf_by_lines(fake_node("string", 0, 40), code, max_size=5)
    assert len(windows) == 1
    assert rebuild_text(windows[0], code).text == "x" * 40


def test_deeply_nested_oversized_nodes_terminate(fake_node) -> None:
    code = b"y" * 20
    node = fake_node("leaf", 0, 20)
    for _ in range(5000):
        node = fake_node("wrapper", 0, 20, children=[node])

    windows = greedy_assign_windows([node], code, NwsIndex(code), max_size=5)
    assert len(windows) == 1
    assert windows[0].is_partial


def test_merge_combines_neighbours_within_budget() -> None:
    windows = [Window(size=3), Window(size=3), Window(size=3)]
    merged = merge_adjacent_windows(windows, max_size=7)
    assert [window.size for window in merged] == [6, 3]


def test_merge_keeps_line_ranges_only_for_split_pieces(fake_node) -> None:
    pieces = split_leaf_by_lines(fake_node("string", 0, 15), CODE, max_size=4)
    assert len(pieces) == 3

    merged = merge_adjacent_windows(pieces, max_size=8)
    assert len(merged) == 2
    assert merged[0].line_ranges == [LineRange(0, 0), LineRange(1, 1)]
    assert rebuild_text(merged[0], CODE).line_range == LineRange(0, 1)

    whole = Window.of(fake_node("line", 0, 4), 4)
    mixed = merge_adjacent_windows([whole, pieces[2]], max_size=8)
    assert len(mixed) == 1
    assert mixed[0].is_partial
    assert mixed[0].line_ranges == []
    assert rebuild_text(mixed[0], CODE).line_range == LineRange(0, 2)


def test_merge_of_nothing() -> None:
    assert merge_adjacent_windows([], 10) == []


def test_empty_window_rebuilds_to_empty_text() -> None:
    rebuilt = rebuild_text(Window(), CODE)
    assert rebuilt.text == ""
    assert rebuilt.byte_range == ByteRange(0, 0)
    assert rebuilt.line_range == LineRange(0, 0)


def test_rebuild_trims_trailing_newlines(fake_node) -> None:
    code = b"abc\r\n\n\n"
    rebuilt = rebuild_text(Window.of(fake_node("x", 0, len(code)), 3), code)
    assert rebuilt.text == "abc"
    assert rebuilt.byte_range == ByteRange(0, 3)
    assert rebuilt.line_range == LineRange(0, 0)


def test_windows_reassemble_source(fake_node) -> None:
    block = fake_node("block", 0, 15, children=_line_nodes(fake_node))
    windows = greedy_assign_windows([block], CODE, NwsIndex(CODE), max_size=5)

    rebuilt = [rebuild_text(window, CODE) for window in windows]
    pieces = []
    cursor = 0
    for item in rebuilt:
        assert item.byte_range.start >= cursor
        assert CODE[cursor : item.byte_range.start].strip() == b""
        pieces.append(CODE[cursor : item.byte_range.start].decode() + item.text)
        cursor = item.byte_range.end
    pieces.append(CODE[cursor:].decode())
    assert "".join(pieces) == CODE.decode()


def test_build_windows_drops_whitespace_only_windows(fake_node) -> None:
    code = b"aaaa\nbbbb\n"
    root = fake_node(
        "module",
        0,
        10,
        children=[fake_node("word", 0, 4), fake_node("\n", 4, 5), fake_node("word", 5, 9)],
    )
    windows = build_windows(root, code, max_size=3)
    assert _texts(windows, code) == ["aaaa", "bbbb"]


def test_build_windows_of_empty_root(fake_node) -> None:
    assert build_windows(fake_node("module", 0, 0), b"", max_size=10) == []
