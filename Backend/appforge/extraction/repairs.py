# appforge/extraction/repairs.py
"""
Ordered textual repairs for malformed model JSON.

Applied cumulatively, re-parsing after each one, until the text parses.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple


@dataclass(frozen=True)
class JsonRepair:
    """A single regex rewrite for a common model JSON defect."""
    name: str
    description: str
    pattern: str
    replacement: str

    def apply(self, text: str) -> str:
        return re.sub(self.pattern, self.replacement, text)


JSON_REPAIRS: List[JsonRepair] = [
    JsonRepair(
        name="trailing_commas",
        description="Drop commas directly before a closing brace or bracket",
        pattern=r",(\s*[}\]])",
        replacement=r"\1",
    ),
    JsonRepair(
        name="unquoted_keys",
        description="Quote bare identifier keys",
        pattern=r"([{,]\s*)(\w+):",
        replacement=r'\1"\2":',
    ),
    JsonRepair(
        name="single_quoted_values",
        description="Convert single-quoted string values to double quotes",
        pattern=r":\s*'([^']*)'",
        replacement=r': "\1"',
    ),
]


def try_parse(text: str) -> Tuple[bool, Any]:
    """Strict parse. Returns (ok, value)."""
    try:
        return True, json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return False, None


def parse_with_repairs(
    text: str,
    repairs: Optional[List[JsonRepair]] = None,
) -> Tuple[bool, Any, List[str]]:
    """
    Apply repairs in order, re-parsing after each.

    Returns:
        (ok, value, names of repairs applied so far)
    """
    repairs = JSON_REPAIRS if repairs is None else repairs
    applied: List[str] = []
    current = text

    for repair in repairs:
        rewritten = repair.apply(current)
        if rewritten == current:
            continue
        current = rewritten
        applied.append(repair.name)
        ok, value = try_parse(current)
        if ok:
            return True, value, applied

    return False, None, applied
