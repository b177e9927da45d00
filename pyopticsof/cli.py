from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Hashable, List, Optional, Tuple

import numpy as np

from pyopticsof.config.io import load_optics_of_config
from pyopticsof.config.settings import BACKENDS, OPTICSOFConfig
from pyopticsof.errors import ConfigurationError
from pyopticsof.models import create_model
from pyopticsof.reporting.report import save_jsonl_records, save_run_report, stamp_report_payload

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyopticsof-score",
        description="Score every row of a feature table with OPTICS-OF.",
    )
    parser.add_argument("input", help="Feature table: .npy, or delimited text (.csv/.tsv/.txt)")
    parser.add_argument("--config", default=None, help="Optional JSON/YAML config file")
    parser.add_argument("--min-pts", type=int, default=None, help="Neighborhood size (> 1)")
    parser.add_argument("--backend", default=None, choices=list(BACKENDS))
    parser.add_argument("--metric", default=None, help="Distance metric. Default: euclidean")
    parser.add_argument("--n-jobs", type=int, default=None, help="Worker threads per phase")
    parser.add_argument("--contamination", type=float, default=None)
    parser.add_argument(
        "--ids-column",
        action="store_true",
        help="Treat the first column of a text table as object ids",
    )
    parser.add_argument(
        "--delimiter",
        default=None,
        help="Text delimiter. Default: ',' for .csv, tab for .tsv, whitespace otherwise",
    )
    parser.add_argument("--skip-header", type=int, default=0, help="Header lines to skip")
    parser.add_argument("--top", type=int, default=10, help="Print the N most outlying objects")
    parser.add_argument("--output", default=None, help="Optional JSON report path")
    parser.add_argument("--records", default=None, help="Optional JSONL path, one ranked record per object")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def _default_delimiter(path: Path) -> Optional[str]:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return ","
    if suffix == ".tsv":
        return "\t"
    return None


def load_table(
    path: str | Path,
    *,
    delimiter: Optional[str] = None,
    ids_column: bool = False,
    skip_header: int = 0,
) -> Tuple[np.ndarray, Optional[List[Hashable]]]:
    """Load a feature matrix (and optional ids) from `.npy` or delimited text."""

    table_path = Path(path)
    if not table_path.exists():
        raise FileNotFoundError(f"Input not found: {str(table_path)!r}")

    if table_path.suffix.lower() == ".npy":
        if ids_column:
            raise ValueError("--ids-column is only supported for text tables")
        X = np.load(table_path, allow_pickle=False)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        return np.asarray(X, dtype=np.float64), None

    if delimiter is None:
        delimiter = _default_delimiter(table_path)
    raw = np.loadtxt(
        table_path,
        delimiter=delimiter,
        dtype=str,
        skiprows=int(skip_header),
        ndmin=2,
    )
    raw = np.char.strip(raw)

    ids: Optional[List[Hashable]] = None
    if ids_column:
        if raw.shape[1] < 2:
            raise ValueError("--ids-column needs at least one feature column besides the ids")
        ids = [str(v) for v in raw[:, 0]]
        raw = raw[:, 1:]

    try:
        X = raw.astype(np.float64)
    except ValueError as exc:
        raise ValueError(
            f"Non-numeric feature value in {str(table_path)!r} "
            "(use --skip-header for header lines, --ids-column for an id column)"
        ) from exc
    return X, ids


def _resolve_config(args: argparse.Namespace) -> OPTICSOFConfig:
    overrides: dict[str, Any] = {
        "min_pts": args.min_pts,
        "backend": args.backend,
        "metric": args.metric,
        "n_jobs": args.n_jobs,
        "contamination": args.contamination,
    }
    if args.config is not None:
        return load_optics_of_config(args.config, overrides=overrides)

    if args.min_pts is None:
        raise ConfigurationError("--min-pts is required when no --config is given")
    return OPTICSOFConfig.from_dict({k: v for k, v in overrides.items() if v is not None})


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _resolve_config(args)
        X, ids = load_table(
            args.input,
            delimiter=args.delimiter,
            ids_column=bool(args.ids_column),
            skip_header=int(args.skip_header),
        )
        logger.info("Loaded %d objects with %d features from %s", X.shape[0], X.shape[1], args.input)

        detector = create_model("optics_of", **config.to_dict())
        detector.fit(X, ids=ids)
        result = detector.result_

        top = result.top_n(max(int(args.top), 0))
        for rank, (oid, score) in enumerate(top, start=1):
            print(f"{rank}\t{oid}\t{score:.6g}")

        if args.output:
            payload = stamp_report_payload(
                {
                    "input": str(args.input),
                    "config": config.to_dict(),
                    "n_objects": len(result),
                    "threshold": detector.threshold_,
                    "n_outliers": int(np.sum(detector.labels_)),
                    "result": result.to_dict(),
                    "top": [{"id": oid, "score": score} for oid, score in top],
                }
            )
            save_run_report(Path(args.output), payload)

        if args.records:
            labels = dict(zip(result.ids, detector.labels_))
            records = [
                {
                    "rank": rank,
                    "id": oid,
                    "score": result[oid],
                    "normalized": result.meta.normalize_score(result[oid]),
                    "label": int(labels[oid]),
                }
                for rank, oid in enumerate(result.ranking(), start=1)
            ]
            save_jsonl_records(Path(args.records), records)

        return 0
    except Exception as exc:  # noqa: BLE001 - CLI surface error
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
