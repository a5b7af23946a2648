"""
Turns the raw completion text into an InterpretedOutcome.

The model is asked for two marker-delimited blocks but does not reliably
follow format instructions, so every input string maps to some outcome:
a rejection, a structured json/summary pair, or the whole text as an
unstructured JSON candidate.
"""
import json, re
from typing import Any

from .models import InterpretedOutcome, Rejected, Structured, Unstructured
from .prompts import BEGIN_JSON, END_JSON, BEGIN_SUMMARY, END_SUMMARY

REJECTION_MARKER = "Input does not appear to be a medical or clinical note"

_JSON_BLOCK = re.compile(re.escape(BEGIN_JSON) + r"(.*?)" + re.escape(END_JSON), re.DOTALL)
_SUMMARY_BLOCK = re.compile(re.escape(BEGIN_SUMMARY) + r"(.*?)" + re.escape(END_SUMMARY), re.DOTALL)

_FENCE_OPEN = re.compile(r"^\s*```(?:json)?[ \t]*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def interpret(raw_text: str) -> InterpretedOutcome:
    if REJECTION_MARKER in raw_text:
        return Rejected(message=raw_text)

    json_m = _JSON_BLOCK.search(raw_text)
    summary_m = _SUMMARY_BLOCK.search(raw_text)
    if json_m and summary_m:
        return Structured(json_text=json_m.group(1).strip(), summary_text=summary_m.group(1).strip())

    # one block alone is treated the same as none
    return Unstructured(candidate_text=raw_text)


def json_candidate(outcome: InterpretedOutcome) -> str | None:
    if isinstance(outcome, Structured):
        return outcome.json_text
    if isinstance(outcome, Unstructured):
        return outcome.candidate_text
    return None


def decode_json_candidate(text: str | None) -> Any | None:
    """Best-effort json.loads after dropping ```json fences. None if it isn't JSON."""
    if not text:
        return None
    cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text, count=1), count=1).strip()
    if not cleaned:
        return None
    try:
        return json.loads(cleaned)
    except (ValueError, RecursionError):  # deeply nested input overflows the decoder
        return None
