"""
Child-process entry point for report rendering.

    python -m services.report_worker <input.pkl> <params.json> <out.html>

Exit status 0 on success; any failure exits non-zero with the traceback on stderr.
"""

from __future__ import annotations
from pathlib import Path
import json
import sys

import pandas as pd

from services.artifacts import atomic_write_bytes
from services.reporting import ReportParams, build_report_html


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 3:
        print("usage: python -m services.report_worker <input.pkl> <params.json> <out.html>", file=sys.stderr)
        return 2
    data_path, params_path, out_path = (Path(a) for a in args)
    df = pd.read_pickle(data_path)
    params = ReportParams(**json.loads(params_path.read_text(encoding="utf-8")))
    html = build_report_html(df, params)
    atomic_write_bytes(out_path, html.encode("utf-8"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
