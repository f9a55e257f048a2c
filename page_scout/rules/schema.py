# File: page_scout/rules/schema.py
"""JSON-LD structured data inspection."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from page_scout.rules.base import WARNING, AnalysisContext, Findings, Verdict
from page_scout.rules.registry import rule
from page_scout.utils import plural


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not JSON")


def describe_block(raw: str) -> Dict[str, Any]:
    """Тип одного блока JSON-LD.

    Ошибка разбора, ``NaN``/``Infinity`` и блок ``null`` дают ``Invalid JSON``.
    """
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        return {"type": "Invalid JSON", "valid": False}
    if data is None:
        return {"type": "Invalid JSON", "valid": False}

    schema_type: Any = "Unknown"
    if isinstance(data, dict):
        if data.get("@type"):
            schema_type = data["@type"]
        elif isinstance(data.get("@graph"), list):
            schema_type = "Graph"
    return {"type": schema_type, "valid": True}


def _type_label(schema_type: Any) -> str:
    if isinstance(schema_type, list):
        return "/".join(str(item) for item in schema_type)
    return str(schema_type)


@rule("schemaMarkup")
def analyze_schema(ctx: AnalysisContext) -> Verdict:
    schemas: List[Dict[str, Any]] = [describe_block(raw) for raw in ctx.doc.json_ld_blocks()]
    f = Findings()

    if not schemas:
        f.flag(
            WARNING,
            "No JSON-LD structured data found.",
            "Add schema markup (JSON-LD) to enable rich snippets. "
            "Common types: Organization, WebPage, Article, BreadcrumbList.",
        )
        return f.verdict(count=0, schemas=[])

    valid_types = [_type_label(s["type"]) for s in schemas if s["valid"]]
    f.issue(
        f"Found {len(schemas)} JSON-LD {plural(len(schemas), 'block')}: "
        f"{', '.join(valid_types) if valid_types else 'none valid'}."
    )
    invalid = len(schemas) - len(valid_types)
    if invalid:
        f.flag(
            WARNING,
            f"{invalid} schema {'block has' if invalid == 1 else 'blocks have'} invalid JSON.",
            "Fix invalid JSON-LD markup to ensure search engines can parse it.",
        )
    return f.verdict(count=len(schemas), schemas=schemas)
