"""Batch CLI: ``herd-import`` / ``python -m herd_import.cli``."""
