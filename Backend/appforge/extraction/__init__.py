# appforge/extraction/__init__.py
"""
Extraction module - JSON payload recovery, routing decisions, file trees.
"""
from .extractor import (
    ExtractionResult,
    extract,
    extract_message,
    salvage_generated_files,
    check_file_consistency,
    to_plan_record,
)
from .repairs import JsonRepair, JSON_REPAIRS, parse_with_repairs
from .routing import Generate, UseTools, Terminal, RoutingDecision, decide_route
from .file_tree import build_file_tree

__all__ = [
    "ExtractionResult",
    "extract",
    "extract_message",
    "salvage_generated_files",
    "check_file_consistency",
    "to_plan_record",
    "JsonRepair",
    "JSON_REPAIRS",
    "parse_with_repairs",
    "Generate",
    "UseTools",
    "Terminal",
    "RoutingDecision",
    "decide_route",
    "build_file_tree",
]
