"""JSON run reports."""

from __future__ import annotations

from .report import save_jsonl_records, save_run_report, stamp_report_payload

__all__ = ["save_jsonl_records", "save_run_report", "stamp_report_payload"]
