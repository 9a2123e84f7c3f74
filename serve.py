"""Run the workout generator API with uvicorn.

Run with:  python3 serve.py
"""

from __future__ import annotations

import os

import uvicorn

from api.main import create_app

API_PORT = int(os.getenv("PORT", "8000"))


def main() -> None:
    app = create_app()
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=API_PORT, log_level="warning")


if __name__ == "__main__":
    main()
