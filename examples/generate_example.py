"""Encode an example tomlike document to see what the canonical text looks like."""

import sys
sys.path.insert(0, str(__import__("pathlib").Path(__file__).parent.parent))

import math
from datetime import datetime, timezone

import tomlike

doc = {
    "service": "report-builder",
    "version": 3,
    "debug": False,
    "started": datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc),
    "threshold": math.nan,
    "hosts": [f"worker-{i:02d}.internal" for i in range(6)],
    "database": {
        "url": "postgres://db.internal:5432/reports",
        "pool": {"min": 2, "max": 20, "timeout": 30.5},
        "replicas": [
            {"host": "replica-a.internal", "port": 5432, "lag_alert_seconds": 120},
            {"host": "replica-b.internal", "port": 5432, "lag_alert_seconds": 120},
        ],
    },
    "limits": {
        "requests_per_minute": 100,
        "burst": None,
    },
}

text = tomlike.encode(doc)

output = __import__("pathlib").Path(__file__).parent / "example.tl"
output.write_text(text, encoding="utf-8")
print(f"Generated {output} ({len(text)} characters)")

# Also print the text and decode it back
print()
print("=" * 60)
print("CANONICAL TEXT:")
print("=" * 60)
print()
print(text)

config = tomlike.decode(output.read_bytes(), attribute_access=True)
print(f"database pool max = {config.database.pool.max}")
