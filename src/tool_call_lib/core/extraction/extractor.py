"""Extract tool calls from model output.

Input may be a JSON document, free text with JSON objects embedded in it, or a
truncated JSON document (for example a partial streaming response). Only a
small family of explicit shapes is recognized:

* ``{"tool": "name", "args": {...}}``
* ``{"tool_call": {"tool": "name", "args": {...}}}``
* ``{"tool_calls": [{"tool": ..., "args": ...}, ...]}`` and plain lists of calls

Repair of truncated input is a best-effort heuristic: at most three missing
closing braces are added, and a repaired document is only accepted if it
contains a structurally valid tool call.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Mapping, NamedTuple, Optional, Pattern, Sequence, Tuple

from ..logger import get_logger
from ..tools.models import ToolCallRecord

logger = get_logger(__name__)

MAX_MISSING_CLOSERS = 3
DEFAULT_MAX_DEPTH = 32
DEFAULT_MAX_NODES = 10_000

# Tried in order of specificity; None matches any brace-delimited block.
_CANDIDATE_PATTERNS: Tuple[Tuple[str, Optional[Pattern[str]]], ...] = (
    ("tool_call wrapper", re.compile(r'^\{\s*"tool_call"\s*:')),
    ("flat tool/args object", re.compile(r'"tool"\s*:.*"args"\s*:|"args"\s*:.*"tool"\s*:', re.DOTALL)),
    ("generic object", None),
)

_REPAIR_SUFFIXES = ("}", "}}", "}}}", '"', '"}', '"}}')

_SKIPPED_KEYS = ("tool_call", "tool_calls")


def has_tool_call_structure(obj: Any) -> bool:
    """Return True if ``obj`` is a mapping with a non-empty string ``tool`` and an ``args`` key."""
    return isinstance(obj, Mapping) and isinstance(obj.get("tool"), str) and len(obj["tool"]) > 0 and "args" in obj


class BraceScan(NamedTuple):
    """Result of scanning text for curly-brace blocks.

    Attributes:
        blocks: ``(start, end)`` spans of balanced blocks, sorted by start offset.
        unmatched: Offsets of opening braces that were never closed, outermost first.
    """

    blocks: List[Tuple[int, int]]
    unmatched: List[int]


def scan_braces(text: str) -> BraceScan:
    """Locate balanced ``{...}`` blocks, ignoring braces inside JSON strings.

    String state is only tracked inside a block, so stray quotes in surrounding
    prose do not hide the JSON that follows them.
    """
    stack: List[int] = []
    blocks: List[Tuple[int, int]] = []
    in_string = False
    escaped = False

    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"' and stack:
            in_string = True
        elif ch == "{":
            stack.append(i)
        elif ch == "}" and stack:
            blocks.append((stack.pop(), i + 1))

    blocks.sort()
    return BraceScan(blocks=blocks, unmatched=stack)


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


class ToolCallExtractor:
    """
    Turns raw model output into an ordered list of ``ToolCallRecord`` objects.

    The search through parsed structures is bounded by ``max_depth`` nesting levels
    and ``max_nodes`` visited containers so pathological input cannot stall it.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, max_nodes: int = DEFAULT_MAX_NODES) -> None:
        """Initialize the extractor.

        Args:
            max_depth: Maximum nesting depth searched for tool calls.
            max_nodes: Maximum number of objects/lists visited per parsed document.
        """
        self.max_depth = max_depth
        self.max_nodes = max_nodes

    def extract(self, data: Any) -> Optional[List[ToolCallRecord]]:
        """Extract tool calls from text or an already parsed structure.

        Args:
            data: A string, a mapping or a list. Anything else yields None.

        Returns:
            The records in discovery order, or None if no tool call was found.
        """
        if isinstance(data, str):
            documents = self._parse_string(data)
        elif isinstance(data, (Mapping, list)):
            documents = [data]
        else:
            return None

        records: List[ToolCallRecord] = []
        for document in documents:
            records.extend(self._discover(document))
        return records or None

    def extract_all(self, data: Any) -> Optional[List[ToolCallRecord]]:
        """Extract tool calls line by line and from the whole input.

        Records found in the whole input are appended only if an equal record
        (same tool, structurally equal args) was not already found in a line.

        Args:
            data: The input. Non-string input is handled exactly like ``extract``.

        Returns:
            The merged records, or None if nothing was found.
        """
        if not isinstance(data, str):
            return self.extract(data)

        records: List[ToolCallRecord] = []
        for line in data.splitlines():
            found = self.extract(line.strip())
            if found:
                records.extend(found)

        whole = self.extract(data)
        if whole:
            seen = {r.key() for r in records}
            for record in whole:
                if record.key() not in seen:
                    seen.add(record.key())
                    records.append(record)

        return records or None

    @staticmethod
    def validate(records: Any) -> List[ToolCallRecord]:
        """Drop records that are unsafe to execute.

        A record survives if its tool name is a non-empty string without whitespace
        and its args are a mapping.

        Args:
            records: A list of ``ToolCallRecord`` objects or ``{"tool", "args"}`` mappings.

        Returns:
            The surviving records, as ``ToolCallRecord`` objects.
        """
        if not isinstance(records, (list, tuple)):
            return []

        valid: List[ToolCallRecord] = []
        for item in records:
            if isinstance(item, ToolCallRecord):
                tool, args = item.tool, item.args
            elif has_tool_call_structure(item):
                tool, args = item["tool"], item["args"]
            else:
                continue

            if not isinstance(tool, str) or not tool or any(ch.isspace() for ch in tool):
                continue
            if not isinstance(args, Mapping):
                continue

            valid.append(item if isinstance(item, ToolCallRecord) else ToolCallRecord(tool=tool, args=dict(args)))
        return valid

    def _parse_string(self, text: str) -> List[Any]:
        trimmed = text.strip()
        if not trimmed:
            return []

        parsed = _loads(trimmed)
        if isinstance(parsed, (dict, list)):
            return [parsed]

        candidates = self._scan_candidates(trimmed)
        if candidates:
            return candidates

        repaired = self._repair(trimmed)
        if repaired is not None:
            return [repaired]

        return []

    def _scan_candidates(self, text: str) -> List[Any]:
        scan = scan_braces(text)
        if not scan.blocks:
            return []

        for label, pattern in _CANDIDATE_PATTERNS:
            accepted: List[Any] = []
            accepted_spans: List[Tuple[int, int]] = []

            for start, end in scan.blocks:
                if any(s <= start and end <= e for s, e in accepted_spans):
                    continue
                snippet = text[start:end]
                if pattern is not None and not pattern.search(snippet):
                    continue
                parsed = _loads(snippet)
                if self._contains_tool_call(parsed):
                    accepted.append(parsed)
                    accepted_spans.append((start, end))

            if accepted:
                logger.debug("Found %d tool call candidate(s) using the %s pattern.", len(accepted), label)
                return accepted

        return []

    def _repair(self, text: str) -> Any:
        for suffix in _REPAIR_SUFFIXES:
            parsed = _loads(text + suffix)
            if self._contains_tool_call(parsed):
                logger.debug("Repaired truncated tool call by appending %r.", suffix)
                return parsed

        scan = scan_braces(text)
        missing = len(scan.unmatched)
        if 0 < missing <= MAX_MISSING_CLOSERS:
            candidate = text[scan.unmatched[0] :] + "}" * missing
            parsed = _loads(candidate)
            if self._contains_tool_call(parsed):
                logger.debug("Repaired truncated tool call by balancing %d brace(s).", missing)
                return parsed

        return None

    def _contains_tool_call(self, parsed: Any) -> bool:
        return isinstance(parsed, (dict, list)) and bool(self._discover(parsed))

    def _discover(self, document: Any) -> List[ToolCallRecord]:
        records: List[ToolCallRecord] = []
        budget = self.max_nodes

        def walk(node: Any, depth: int) -> None:
            nonlocal budget
            if not isinstance(node, (Mapping, list)):
                return
            if depth > self.max_depth or budget <= 0:
                logger.debug("Tool call search bound reached (depth=%d, remaining nodes=%d).", depth, budget)
                return
            budget -= 1

            if has_tool_call_structure(node):
                records.append(ToolCallRecord.from_mapping(node))

            if isinstance(node, Mapping):
                wrapped = node.get("tool_call")
                if has_tool_call_structure(wrapped):
                    records.append(ToolCallRecord.from_mapping(wrapped))

                batch = node.get("tool_calls")
                if isinstance(batch, list):
                    for item in batch:
                        if has_tool_call_structure(item):
                            records.append(ToolCallRecord.from_mapping(item))

                for key, value in node.items():
                    if key not in _SKIPPED_KEYS:
                        walk(value, depth + 1)
            else:
                for item in node:
                    if has_tool_call_structure(item):
                        records.append(ToolCallRecord.from_mapping(item))
                    else:
                        walk(item, depth + 1)

        walk(document, 0)
        return records


_default_extractor = ToolCallExtractor()


def extract(data: Any) -> Optional[List[ToolCallRecord]]:
    """Extract tool calls using a default ``ToolCallExtractor``."""
    return _default_extractor.extract(data)


def extract_all(data: Any) -> Optional[List[ToolCallRecord]]:
    """Line-by-line plus whole-input extraction using a default ``ToolCallExtractor``."""
    return _default_extractor.extract_all(data)


def validate_tool_calls(records: Sequence[Any]) -> List[ToolCallRecord]:
    """Filter records that are unsafe to execute. See ``ToolCallExtractor.validate``."""
    return ToolCallExtractor.validate(records)
