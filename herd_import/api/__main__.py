from __future__ import annotations

import os

import uvicorn

"""Run the HTTP API: ``python -m herd_import.api`` (HOST / PORT env)."""


def main() -> None:  # pragma: no cover
    uvicorn.run(
        "herd_import.api.app:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":  # pragma: no cover
    main()
