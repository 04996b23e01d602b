"""JSON report and its Draft-07 schema.

The document is validated against ``REPORT_SCHEMA`` before it is emitted so
that consumers can rely on its shape.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from jsonschema import Draft7Validator

from common.timestamps import to_rfc3339
from versioning.models import DependencyResult, ManifestResult

_DEPENDENCY = {
    "type": "object",
    "required": ["name", "version_spec"],
    "properties": {
        "name": {"type": "string"},
        "version_spec": {"type": "string"},
        "section": {"type": "string"},
        "dev": {"type": "boolean"},
    },
}

REPORT_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["dry_run", "summary", "manifests"],
    "properties": {
        "dry_run": {"type": "boolean"},
        "summary": {
            "type": "object",
            "required": ["updates", "skips"],
            "properties": {
                "updates": {"type": "integer", "minimum": 0},
                "skips": {"type": "integer", "minimum": 0},
                "errors": {"type": "integer", "minimum": 0},
            },
        },
        "manifests": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["path", "language", "updates"],
                "properties": {
                    "path": {"type": "string"},
                    "language": {"type": "string"},
                    "updates": {
                        "type": "array",
                        "items": {
                            "oneOf": [
                                {
                                    "type": "object",
                                    "required": ["type", "dependency", "new_version", "released_at"],
                                    "properties": {
                                        "type": {"const": "update"},
                                        "dependency": _DEPENDENCY,
                                        "new_version": {"type": "string"},
                                        "new_version_spec": {"type": "string"},
                                        "change": {"enum": ["major", "minor", "patch"]},
                                        "released_at": {
                                            "type": ["string", "null"],
                                            "pattern": r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$",
                                        },
                                        "error": {"type": "string"},
                                    },
                                },
                                {
                                    "type": "object",
                                    "required": ["type", "dependency", "reason"],
                                    "properties": {
                                        "type": {"const": "skip"},
                                        "dependency": _DEPENDENCY,
                                        "reason": {"type": "string"},
                                        "detail": {"type": "string"},
                                    },
                                },
                            ]
                        },
                    },
                    "errors": {"type": "array", "items": {"type": "string"}},
                },
            },
        },
    },
}


class SchemaError(ValueError):
    """Raised when a report fails to validate against REPORT_SCHEMA."""


def validate_report(data: Dict[str, Any]) -> None:
    """Strictly validate a report; raise SchemaError on the first problem."""
    validator = Draft7Validator(REPORT_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise SchemaError(f"Invalid report at '{path}': {first.message}")


def _dependency(result: DependencyResult) -> Dict[str, Any]:
    dep = result.dependency
    return {
        "name": dep.name,
        "version_spec": dep.spec.raw_text,
        "section": dep.section_label,
        "dev": dep.is_dev,
    }


def _entry(result: DependencyResult) -> Dict[str, Any]:
    decision = result.decision
    if decision.is_update:
        entry = {
            "type": "update",
            "dependency": _dependency(result),
            "new_version": decision.new_version.text,
            "new_version_spec": decision.new_spec_text,
            "change": decision.change_kind.value,
            "released_at": to_rfc3339(decision.released_at) if decision.released_at else None,
        }
        if result.patch_error:
            entry["error"] = result.patch_error
        return entry
    entry = {
        "type": "skip",
        "dependency": _dependency(result),
        "reason": decision.reason.value,
    }
    if decision.detail:
        entry["detail"] = decision.detail
    return entry


def _manifest(manifest: ManifestResult, verbose: bool) -> Dict[str, Any]:
    entries: List[Dict[str, Any]] = [_entry(r) for r in manifest.updates]
    if verbose:
        entries.extend(_entry(r) for r in manifest.skips)
    data = {
        "path": manifest.path,
        "language": manifest.ecosystem.value,
        "updates": entries,
    }
    if manifest.errors:
        data["errors"] = list(manifest.errors)
    return data


def build_report(run_result, verbose: bool = False) -> Dict[str, Any]:
    """Build the JSON-ready report for a RunResult; skips are listed only when verbose."""
    report = {
        "dry_run": run_result.dry_run,
        "summary": {
            "updates": run_result.update_count,
            "skips": run_result.skip_count,
            "errors": sum(len(m.errors) for m in run_result.manifests),
        },
        "manifests": [_manifest(m, verbose) for m in run_result.manifests],
    }
    validate_report(report)
    return report


def render_json(run_result, verbose: bool = False) -> str:
    return json.dumps(build_report(run_result, verbose), indent=2) + "\n"
