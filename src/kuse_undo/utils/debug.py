"""Raw filesystem tracing for the undo primitives.

The structured log records what happened to a conversation. Below that,
``fs_ops`` and ``paths`` call debug() for each individual disk step, which is
what you want when a backup or trash entry is not where its record says it is.

Set KUSE_DEBUG to 1, true or yes before import to turn the trace on; it is
written to stdout with a ``[DEBUG]`` prefix.
"""

import os
import sys
from typing import Any

_DEBUG_ENABLED = os.environ.get("KUSE_DEBUG", "").lower() in (
    "1",
    "true",
    "yes",
)


def debug(msg: Any) -> None:
    """Trace one filesystem step when KUSE_DEBUG was set at import."""
    if _DEBUG_ENABLED:
        print(f"[DEBUG] {msg}", file=sys.stdout)
