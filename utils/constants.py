"""Utilities Constants
- Centralized limits and defaults used by services, screens and tests.
- Operator overrides are read through utils.runtime (env vars).
"""

SCHEMA_VERSION = "2026-10-01"

# Artifacts
ARTIFACTS_DIR = "artifacts"  # relative to repo root; JSONL logs + published downloads

# Ingress
MAX_UPLOAD_BYTES = 5 * 1024 * 1024       # 5 MB; keep in sync with .streamlit/config.toml
UPLOAD_PREFIX = "upload_"                # temp files are named by the runtime, not the client
ALLOWED_EXTENSIONS = (".csv", ".tsv")    # re-validated server-side; widget filter is advisory

# Transform
DELIMITER_BY_EXTENSION = {".csv": ",", ".tsv": "\t"}
DELIMITER_CHOICES = {"Comma": ",", "Tab": "\t", "Semicolon": ";", "Pipe": "|"}
PREVIEW_ROWS = 5

# Egress
DOWNLOAD_FORMATS = {"csv": ("text/csv", ","), "tsv": ("text/tab-separated-values", "\t")}
DEFAULT_NAME_TEMPLATE = "{stem}_clean.{ext}"

# Reporting
REPORT_TIMEOUT_SEC = 60
REPORT_MAX_ROWS = 100

# Profiling (report)
PROF_SAMPLE_CAP = 50000  # rows
HIGH_CARD_FRAC = 0.50    # >50% unique => high cardinality
EXAMPLE_VALUES = 3       # show up to 3 unique examples
