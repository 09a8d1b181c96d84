"""Per-table row queries against the data API."""
