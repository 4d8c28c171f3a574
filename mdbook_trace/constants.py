from __future__ import annotations

PREPROCESSOR_NAME = "trace-preprocessor"
CONFIG_SECTION = "trace"

TRACE_KEYWORDS = ("trace", "tr")
MATRIX_KEYWORDS = ("tracematrix", "trace_matrix")

MARKER_OPEN = "{{#"
MARKER_CLOSE = "}}"

PARENT_NUMBERING_POLICIES = ("allow-duplicates", "offset", "zero")

DEFAULT_RECORD_HEADING = "Record"
DEFAULT_TRACE_HEADING = "Traces"
DEFAULT_PARENT_NUMBERING = "zero"

SUPPORTED_MDBOOK_VERSION = (0, 4)
UNSUPPORTED_RENDERERS = {"not-supported"}

LOG_LEVEL_ENV_VAR = "MDBOOK_TRACE_LOG"

REPORT_SCHEMA_VERSION = 1
