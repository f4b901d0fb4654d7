"""Pure domain logic: row extraction and graph materialization (no I/O)."""
