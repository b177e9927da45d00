from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pyopticsof.utils.jsonable import to_jsonable

REPORT_SCHEMA_VERSION = 1


def stamp_report_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Attach run-level metadata to report payloads without changing their shape."""

    from pyopticsof import __version__

    stamped = dict(payload)
    stamped.setdefault("schema_version", int(REPORT_SCHEMA_VERSION))
    stamped.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    stamped.setdefault("pyopticsof_version", __version__)
    return stamped


def save_run_report(path: str | Path, results: dict) -> None:
    """Save a run result dict as strict JSON (numpy types and non-finite floats converted)."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    payload = to_jsonable(results)
    out_path.write_text(
        json.dumps(payload, indent=2, sort_keys=True, allow_nan=False),
        encoding="utf-8",
    )


def save_jsonl_records(path: str | Path, records: list[dict]) -> None:
    """Save a list of dict records as JSONL, one per object (e.g. ranked scores)."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    with out_path.open("w", encoding="utf-8") as f:
        for record in records:
            payload = to_jsonable(record)
            f.write(json.dumps(payload, sort_keys=True, allow_nan=False))
            f.write("\n")
