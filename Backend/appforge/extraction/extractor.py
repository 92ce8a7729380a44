# appforge/extraction/extractor.py
"""
Structured output extractor.

Pulls a JSON payload out of free-form model text:
1. strip surrounding code fences
2. isolate the ___start___ / ___end___ block when present
3. strict parse (whole candidate, then the outermost brace span)
4. ordered repairs, re-parsing after each
5. synthetic placeholder record carrying the raw text

extract() never raises.
"""
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from appforge.core.constants import START_MARKER, END_MARKER, SYNTHETIC_FEATURES
from appforge.core.logging import log
from appforge.core.types import PlanRecord
from appforge.extraction.repairs import parse_with_repairs, try_parse


LEADING_FENCE_RE = re.compile(r"^\s*```[A-Za-z]*\s*")
TRAILING_FENCE_RE = re.compile(r"\s*```\s*$")
BRACE_SPAN_RE = re.compile(r"\{[\s\S]*\}")
GENERATED_FILES_RE = re.compile(r'"generatedFiles":\s*({[\s\S]*?})\s*(?:,\s*"files"|$)')
MESSAGE_RE = re.compile(r'"filesCount"\s*:\s*\d+\s*,\s*"message"\s*:\s*"([^"]+)"')

ExtractionSource = Literal["strict", "repaired", "synthetic"]


@dataclass
class ExtractionResult:
    data: Any
    source: ExtractionSource
    raw: str
    repairs_applied: List[str] = field(default_factory=list)

    @property
    def is_synthetic(self) -> bool:
        return self.source == "synthetic"


@dataclass
class FileConsistency:
    """Mismatch between "files", "generatedFiles" and "filesCount"."""
    missing_code: List[str] = field(default_factory=list)
    unlisted: List[str] = field(default_factory=list)
    declared_count: Optional[int] = None
    actual_count: int = 0

    @property
    def ok(self) -> bool:
        count_ok = self.declared_count is None or self.declared_count == self.actual_count
        return not self.missing_code and not self.unlisted and count_ok


def strip_fences(text: str) -> str:
    text = LEADING_FENCE_RE.sub("", text, count=1)
    return TRAILING_FENCE_RE.sub("", text, count=1)


def isolate_markers(text: str) -> str:
    """Substring between the payload markers, or the full text if absent."""
    if START_MARKER not in text:
        return text
    inner = text.split(START_MARKER, 1)[1]
    if END_MARKER in inner:
        inner = inner.split(END_MARKER, 1)[0]
    return inner


def synthetic_record(raw: str, label: Optional[str] = None) -> Dict[str, Any]:
    return {
        "rawPlan": raw,
        "description": f"Analysis of: {label}" if label else "Unstructured model output",
        "features": list(SYNTHETIC_FEATURES),
    }


def extract(raw: Any, label: Optional[str] = None) -> ExtractionResult:
    """
    Extract a JSON value from model text.

    Args:
        raw: Model output
        label: Used in the synthetic record description (e.g. the user input)
    """
    text = raw if isinstance(raw, str) else ("" if raw is None else str(raw))
    candidate = isolate_markers(strip_fences(text)).strip()

    ok, value = try_parse(candidate)
    if ok:
        return ExtractionResult(value, "strict", text)

    span = BRACE_SPAN_RE.search(candidate)
    if span and span.group(0) != candidate:
        candidate = span.group(0)
        ok, value = try_parse(candidate)
        if ok:
            return ExtractionResult(value, "strict", text)

    ok, value, applied = parse_with_repairs(candidate)
    if ok:
        log("EXTRACT", f"Parsed after repairs: {', '.join(applied)}")
        return ExtractionResult(value, "repaired", text, applied)

    log("EXTRACT", f"Unparsable output ({len(text)} chars), using synthetic record")
    return ExtractionResult(synthetic_record(text, label), "synthetic", text, applied)


def salvage_generated_files(raw: Any) -> Optional[Dict[str, Any]]:
    """Recover the generatedFiles object from otherwise unparsable text."""
    if not isinstance(raw, str) or not raw.strip():
        return None

    match = GENERATED_FILES_RE.search(raw)
    if not match:
        return None

    fragment = match.group(1)
    ok, value = try_parse(fragment)
    if not ok:
        ok, value, _ = parse_with_repairs(fragment)
    if not ok or not isinstance(value, dict):
        log("EXTRACT", "generatedFiles fragment found but not parsable")
        return None
    return value


def extract_message(raw: Any) -> Optional[str]:
    """The user-facing "message" that follows "filesCount" in generation output."""
    if not isinstance(raw, str):
        return None
    match = MESSAGE_RE.search(raw)
    return match.group(1) if match else None


def check_file_consistency(data: Any, project_id: Optional[str] = None) -> FileConsistency:
    """Compare "files" against "generatedFiles". Logs, never mutates."""
    if not isinstance(data, dict):
        return FileConsistency()

    generated = data.get("generatedFiles") if isinstance(data.get("generatedFiles"), dict) else {}
    listed = [f for f in data.get("files") or [] if isinstance(f, str)]
    declared = data.get("filesCount")

    report = FileConsistency(
        missing_code=[f for f in listed if f not in generated],
        unlisted=[f for f in generated if f not in listed],
        declared_count=declared if isinstance(declared, int) else None,
        actual_count=len(set(listed) | set(generated)),
    )
    if not report.ok:
        log(
            "EXTRACT",
            "File list inconsistent with generatedFiles",
            {
                "listed_without_code": report.missing_code,
                "code_not_listed": report.unlisted,
                "filesCount": report.declared_count,
                "actual": report.actual_count,
            },
            project_id=project_id,
        )
    return report


def _file_content(value: Any) -> str:
    if isinstance(value, dict) and "code" in value:
        code = value["code"]
        return code if isinstance(code, str) else json.dumps(code, indent=2)
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2)


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item if isinstance(item, str) else json.dumps(item) for item in value]
    return [str(value)]


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def file_label(entry: Any) -> str:
    """Models sometimes describe files as objects instead of paths."""
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        return str(entry.get("name") or entry.get("path") or entry.get("filename") or entry)
    return str(entry)


def to_plan_record(data: Any, title: str = "") -> PlanRecord:
    """
    Project parsed payload onto a PlanRecord.

    The file list becomes the ordered union of "files" and "generatedFiles";
    listed paths without code get empty content (already logged by
    check_file_consistency).
    """
    data = data if isinstance(data, dict) else {}
    raw_files = data.get("generatedFiles") if isinstance(data.get("generatedFiles"), dict) else {}

    generated = {path: _file_content(value) for path, value in raw_files.items()}
    file_list: List[str] = []
    for path in [*_string_list(data.get("files")), *generated]:
        if path not in file_list:
            file_list.append(path)
    for path in file_list:
        generated.setdefault(path, "")

    frontend_files = [file_label(f) for f in _as_list(data.get("frontendFiles"))]
    routes = [r for r in _as_list(data.get("backendRoutes")) if isinstance(r, dict)]
    brand_kit = data.get("brandKit") if isinstance(data.get("brandKit"), dict) else {}

    replication = None
    for key in ("replicationSpecs", "visualAnalysis", "cloneStrategy", "replicationDetails", "visualReplication"):
        if isinstance(data.get(key), dict):
            replication = data[key]
            break

    return PlanRecord(
        title=title,
        narrative_steps=_string_list(data.get("Steps")),
        generated_files=generated,
        file_list=file_list,
        file_count=len(file_list),
        frontend_files=frontend_files,
        backend_routes=routes,
        brand_kit=brand_kit,
        replication_strategy=replication,
        url=data.get("url") if isinstance(data.get("url"), str) else None,
        message=data.get("message") if isinstance(data.get("message"), str) else None,
    )
