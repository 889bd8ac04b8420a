"""HTTP API (FastAPI): ``python -m herd_import.api``."""
