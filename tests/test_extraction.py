import json
from typing import Any, Dict

import pytest

from tool_call_lib import ToolCallExtractor, ToolCallRecord, extract, extract_all, validate_tool_calls
from tool_call_lib.core.extraction import scan_braces


def call(tool: str, **args: Any) -> ToolCallRecord:
    return ToolCallRecord(tool=tool, args=dict(args))


def nest(document: Dict[str, Any], levels: int) -> Dict[str, Any]:
    for _ in range(levels):
        document = {"level": document}
    return document


def test_wrapper_round_trip() -> None:
    text = json.dumps({"tool_call": {"tool": "add", "args": {"x": 2, "y": 3}}})
    assert extract(text) == [call("add", x=2, y=3)]


def test_flat_object() -> None:
    assert extract('{"tool": "search", "args": {"q": "cats"}}') == [call("search", q="cats")]


def test_args_before_tool() -> None:
    assert extract('Result: {"args": {"q": "cats"}, "tool": "search"}') == [call("search", q="cats")]


def test_tool_calls_array() -> None:
    text = '{"tool_calls": [{"tool": "a", "args": {}}, {"tool": "b", "args": {"x": 1}}]}'
    assert extract(text) == [call("a"), call("b", x=1)]


def test_top_level_list() -> None:
    assert extract('[{"tool": "a", "args": {}}, {"tool": "b", "args": {}}]') == [call("a"), call("b")]


def test_parsed_mapping_and_list_input() -> None:
    assert extract({"tool_call": {"tool": "a", "args": {"k": "v"}}}) == [call("a", k="v")]
    assert extract([{"tool": "a", "args": {}}]) == [call("a")]


def test_call_embedded_in_prose() -> None:
    text = 'Sure! Let me look that up. {"tool": "search", "args": {"q": "weather"}} One moment.'
    assert extract(text) == [call("search", q="weather")]


def test_wrapper_embedded_in_prose_is_found_once() -> None:
    text = 'Calling now: {"tool_call": {"tool": "add", "args": {"x": 1, "y": 2}}} done'
    assert extract(text) == [call("add", x=1, y=2)]


def test_multiple_calls_in_prose_keep_order() -> None:
    text = 'First {"tool": "a", "args": {"n": {"deep": 1}}} and then {"tool": "b", "args": {"n": 2}}.'
    assert extract(text) == [call("a", n={"deep": 1}), call("b", n=2)]


def test_stray_quote_in_prose() -> None:
    assert extract('He said "hi {"tool": "a", "args": {}}') == [call("a")]


def test_braces_inside_strings() -> None:
    text = 'Template: {"tool": "render", "args": {"body": "use {name} here }"}}'
    assert extract(text) == [call("render", body="use {name} here }")]


def test_nested_call_inside_other_structures() -> None:
    document = {"response": {"steps": [{"thought": "hmm"}, {"tool": "a", "args": {}}]}}
    assert extract(document) == [call("a")]


def test_truncated_closing_brace_is_repaired() -> None:
    assert extract('{"tool": "add", "args": {"x": 1}') == [call("add", x=1)]


def test_truncated_string_is_repaired() -> None:
    assert extract('{"tool": "search", "args": {"q": "hello') == [call("search", q="hello")]


def test_truncated_call_after_prose_is_repaired() -> None:
    assert extract('Calling {"tool": "add", "args": {"x": 1') == [call("add", x=1)]


def test_three_missing_closers_are_repaired() -> None:
    assert extract('{"tool_call": {"tool": "x", "args": {"k": 1') == [call("x", k=1)]


def test_four_missing_closers_are_rejected() -> None:
    assert extract('{"a": {"tool_call": {"tool": "x", "args": {"k": 1') is None


def test_tool_name_is_trimmed_and_bad_args_become_empty() -> None:
    assert extract({"tool": "  add  ", "args": [1, 2]}) == [call("add")]
    assert extract({"tool": "a", "args": None}) == [call("a")]


@pytest.mark.parametrize(
    "data",
    [
        None,
        42,
        3.5,
        "",
        "   ",
        "no json here",
        '{"message": "hi"}',
        '{"tool": "a"}',
        '{"tool": "", "args": {}}',
        '{"tool": 5, "args": {}}',
        "{{{{",
    ],
)
def test_no_tool_call(data: Any) -> None:
    assert extract(data) is None


def test_extraction_is_idempotent() -> None:
    text = 'Plan: {"tool": "a", "args": {"x": 1}} then {"tool_call": {"tool": "b", "args": {}}}'
    first = extract(text)
    assert first is not None
    assert extract(text) == first


def test_depth_bound() -> None:
    document = nest({"tool": "deep", "args": {}}, 3)

    assert ToolCallExtractor(max_depth=2).extract(document) is None
    assert ToolCallExtractor(max_depth=3).extract(document) == [call("deep")]
    assert extract(nest({"tool": "deep", "args": {}}, 20)) == [call("deep")]
    assert extract(nest({"tool": "deep", "args": {}}, 50)) is None


def test_node_bound() -> None:
    document = nest({"tool": "deep", "args": {}}, 3)

    assert ToolCallExtractor(max_nodes=3).extract(document) is None
    assert ToolCallExtractor(max_nodes=4).extract(document) == [call("deep")]


def test_deeply_nested_text_does_not_raise() -> None:
    text = "[" * 100_000 + "]" * 100_000
    assert extract(text) is None


def test_extract_all_combines_lines() -> None:
    text = 'Step 1: {"tool": "a", "args": {"x": 1, "y": 2}}\nStep 2: {"tool": "b", "args": {}}'
    assert extract_all(text) == [call("a", x=1, y=2), call("b")]


def test_extract_all_finds_multiline_document() -> None:
    text = '{\n  "tool": "a",\n  "args": {"x": 1}\n}'
    assert extract_all(text) == [call("a", x=1)]


def test_extract_all_keeps_repeated_line_calls() -> None:
    text = 'x {"tool": "a", "args": {}}\ny {"tool": "a", "args": {}}'
    assert extract_all(text) == [call("a"), call("a")]


def test_extract_all_non_string_input() -> None:
    assert extract_all({"tool": "a", "args": {}}) == [call("a")]
    assert extract_all(None) is None


def test_validate_filters_unsafe_records() -> None:
    records = [
        call("ok"),
        call("bad name"),
        ToolCallRecord(tool="no_args", args="oops"),  # type: ignore[arg-type]
        {"tool": "mapped", "args": {"k": 1}},
        {"tool": "listed", "args": [1]},
        "junk",
    ]
    assert validate_tool_calls(records) == [call("ok"), call("mapped", k=1)]


def test_validate_requires_a_list() -> None:
    assert validate_tool_calls("nope") == []  # type: ignore[arg-type]
    assert ToolCallExtractor.validate(None) == []


def test_scan_braces() -> None:
    scan = scan_braces('a {"s": "}"} b {')
    assert scan.blocks == [(2, 12)]
    assert scan.unmatched == [15]


def test_record_key_ignores_argument_order() -> None:
    assert call("a", x=1, y=2).key() == ToolCallRecord(tool="a", args={"y": 2, "x": 1}).key()
    assert call("a", x=1).key() != call("a", x=2).key()
