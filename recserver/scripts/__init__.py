"""Batch scripts (python -m recserver.scripts.<name>)."""
