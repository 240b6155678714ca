"""Export of reviewer-confirmed decision candidates.

Kept candidates are written as a flat record set that the downstream
decision log can import. Slider fields (impact, cost, risk, urgency,
confidence) come from the review step and are left empty when unset.
"""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from dnav.extract.candidates import DecisionCandidate

logger = logging.getLogger(__name__)

EXPORT_FIELDS = [
    "docLabel",
    "docId",
    "pageNumber",
    "decisionText",
    "category",
    "impact",
    "cost",
    "risk",
    "urgency",
    "confidence",
    "decisionScore",
    "triggers",
    "timestamp",
]

EXPORT_FORMATS = ("csv", "json", "xlsx")


def build_records(
    candidates: Iterable[DecisionCandidate],
    timestamp: datetime | None = None,
) -> list[dict[str, Any]]:
    """Build export records for kept candidates.

    Args:
        candidates: Candidates to consider; only kept ones are exported.
        timestamp: Export time (default: now).

    Returns:
        One record per kept candidate, in input order.
    """
    stamp = (timestamp or datetime.now()).isoformat(timespec="seconds")
    records: list[dict[str, Any]] = []
    for candidate in candidates:
        if not candidate.kept:
            continue
        metrics = candidate.metrics
        records.append(
            {
                "docLabel": candidate.doc_label,
                "docId": candidate.doc_id,
                "pageNumber": candidate.page_number,
                "decisionText": candidate.decision_text,
                "category": candidate.category,
                "impact": metrics.impact,
                "cost": metrics.cost,
                "risk": metrics.risk,
                "urgency": metrics.urgency,
                "confidence": metrics.confidence,
                "decisionScore": candidate.decision_score,
                "triggers": list(candidate.triggers),
                "timestamp": stamp,
            }
        )
    return records


def _flatten(record: dict[str, Any]) -> list[Any]:
    row = []
    for name in EXPORT_FIELDS:
        value = record[name]
        if isinstance(value, list):
            value = "|".join(value)
        row.append("" if value is None else value)
    return row


def write_csv(records: list[dict[str, Any]], path: Path) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_ALL)
        writer.writerow(EXPORT_FIELDS)
        for record in records:
            writer.writerow(_flatten(record))


def write_json(records: list[dict[str, Any]], path: Path) -> None:
    path.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")


def write_xlsx(records: list[dict[str, Any]], path: Path) -> None:
    from openpyxl import Workbook

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Decisions"
    sheet.append(EXPORT_FIELDS)
    for record in records:
        sheet.append(_flatten(record))
    workbook.save(path)


def export_candidates(
    candidates: Iterable[DecisionCandidate],
    path: Path,
    fmt: str | None = None,
    timestamp: datetime | None = None,
) -> int:
    """Write kept candidates to a file.

    Args:
        candidates: Candidates to export; unkept ones are skipped.
        path: Output file.
        fmt: One of csv, json, xlsx (default: from the file suffix).
        timestamp: Export time stamped on every record.

    Returns:
        Number of records written.

    Raises:
        ValueError: If the format is not supported.
    """
    fmt = (fmt or path.suffix.lstrip(".")).lower()
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt or '(none)'}")

    records = build_records(candidates, timestamp=timestamp)
    path.parent.mkdir(parents=True, exist_ok=True)
    writers = {"csv": write_csv, "json": write_json, "xlsx": write_xlsx}
    writers[fmt](records, path)
    logger.info(f"Exported {len(records)} decisions to {path}")
    return len(records)
