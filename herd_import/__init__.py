"""Herd CSV bulk importer (animals, properties, fields and herd records)."""

__version__ = "0.1.0"
