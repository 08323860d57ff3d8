"""Parquet schema definitions for marble-run artifacts.

Every Arrow schema used for persisting run logs is centralised here so that
writers and readers work against the same column contracts.
"""

from __future__ import annotations

import pyarrow as pa

# ---------------------------------------------------------------------------
# Schema version constants
# ---------------------------------------------------------------------------

TRAJECTORY_SCHEMA_VERSION = 1
RUN_SUMMARY_SCHEMA_VERSION = 1

# ---------------------------------------------------------------------------
# Trajectory schema
# ---------------------------------------------------------------------------

TRAJECTORY_SCHEMA = pa.schema(
    [
        ("run_id", pa.string()),
        ("tick", pa.int64()),
        ("marble_id", pa.string()),
        ("x", pa.int64()),
        ("y", pa.int64()),
        ("state", pa.string()),
        ("momentum", pa.string()),
        ("rotation", pa.int64()),
        ("hue", pa.int64()),
        ("behind_x", pa.int64()),
        ("behind_y", pa.int64()),
    ]
)
"""One row per marble per tick; ``behind_x``/``behind_y`` are null unless behind."""
