"""JSON payload extraction from raw LLM output.

LLMs wrap JSON in commentary and markdown fences. The extractor scans for
top-level bracket spans (ignoring brackets inside JSON strings) and picks the
span most likely to be the payload, so leading and trailing chatter is
tolerated.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Literal

from .models import IssueType, Severity, TextSpan, ValidationIssue

PayloadShape = Literal["array", "object"]

_OPENERS = {"array": "[", "object": "{"}
_CLOSERS = {"[": "]", "{": "}"}

# Deductions for short-circuiting parse failures
NO_PAYLOAD_PENALTY = 0.3
SHAPE_MISMATCH_PENALTY = 0.3


@dataclass(frozen=True)
class ParseOutcome:
    """Result of extracting and parsing a response payload.

    Attributes:
        payload: Parsed JSON value, None when parsing failed.
        span: Location of the payload in the response.
        issue: Issue describing the failure, None on success.
        penalty: Score deduction for the failure.
        zero_score: True when the failure forces the score to 0.
    """

    payload: Any = None
    span: TextSpan | None = None
    issue: ValidationIssue | None = None
    penalty: float = 0.0
    zero_score: bool = False


def estimate_tokens(text: str) -> int:
    """Approximate the token count as one token per four characters."""
    return math.ceil(len(text) / 4)


def scan_top_level_spans(text: str, opener: str) -> tuple[list[tuple[int, int]], int | None]:
    """Find the top-level spans opened by ``opener`` in a single pass.

    Brackets inside double-quoted strings are ignored and backslash escapes
    are honored. Openers nested inside an open span never start a span of
    their own, and stray closers outside any span are ignored.

    Returns:
        The (start, end) of every closed top-level span, and the start of a
        trailing span that never closes (None when every span closed).
    """
    closer = _CLOSERS[opener]
    spans: list[tuple[int, int]] = []
    depth = 0
    start = 0
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            # Quotes only delimit strings inside a payload
            in_string = depth > 0
        elif char == opener:
            if depth == 0:
                start = index
            depth += 1
        elif char == closer and depth > 0:
            depth -= 1
            if depth == 0:
                spans.append((start, index + 1))
    return spans, (start if depth > 0 else None)


def _loads_ok(raw: str) -> bool:
    try:
        json.loads(raw)
    except (ValueError, RecursionError):
        return False
    return True


def extract_json_payload(text: str, expected: PayloadShape) -> tuple[str, TextSpan] | None:
    """Find the JSON payload substring in an LLM response.

    Only top-level spans are candidates, so a list nested inside a truncated
    payload is never mistaken for the payload. Spans opened by the expected
    bracket are preferred; the first one that parses as JSON wins, otherwise
    the first one is returned so the parse error can be reported. When the
    first top-level span never closes, the truncated remainder of the text is
    returned and fails to parse. When no span of the expected kind exists,
    the other bracket kind is tried so a shape mismatch can be reported.

    Args:
        text: Raw response text.
        expected: "array" or "object".

    Returns:
        The payload substring and its span, or None if no bracket was found.
    """
    other: PayloadShape = "object" if expected == "array" else "array"
    for shape in (expected, other):
        spans, unclosed = scan_top_level_spans(text, _OPENERS[shape])
        if not spans:
            if unclosed is not None:
                return text[unclosed:], TextSpan(unclosed, len(text))
            continue
        for start, end in spans:
            if _loads_ok(text[start:end]):
                return text[start:end], TextSpan(start, end)
        start, end = spans[0]
        return text[start:end], TextSpan(start, end)
    return None


def parse_payload(text: str, expected: PayloadShape) -> ParseOutcome:
    """Extract, parse and shape-check the payload of an LLM response.

    Never raises. Failures come back as a ParseOutcome carrying a
    format_error issue and the score deduction it implies.
    """
    found = extract_json_payload(text, expected)
    if found is None:
        return ParseOutcome(
            issue=ValidationIssue(
                type=IssueType.FORMAT_ERROR,
                severity=Severity.HIGH,
                message=f"No valid JSON {expected} found in response",
            ),
            penalty=NO_PAYLOAD_PENALTY,
        )

    raw, span = found
    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as e:
        return ParseOutcome(
            span=span,
            issue=ValidationIssue(
                type=IssueType.FORMAT_ERROR,
                severity=Severity.CRITICAL,
                message=f"Failed to parse response: {e}",
                location=span,
            ),
            zero_score=True,
        )

    shape_ok = isinstance(payload, list) if expected == "array" else isinstance(payload, dict)
    if not shape_ok:
        return ParseOutcome(
            payload=payload,
            span=span,
            issue=ValidationIssue(
                type=IssueType.FORMAT_ERROR,
                severity=Severity.HIGH,
                message=f"Response is not an {expected}",
                location=span,
            ),
            penalty=SHAPE_MISMATCH_PENALTY,
        )

    return ParseOutcome(payload=payload, span=span)
