"""Reconciliation and classification logic (pure, no I/O)."""
