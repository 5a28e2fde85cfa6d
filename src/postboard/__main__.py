"""Postboard entrypoint.

Run with:
  python -m postboard
"""

import os
import uvicorn

from postboard.logs import configure_logging

def main() -> None:
    configure_logging()
    host = os.getenv("POSTBOARD_HOST", "0.0.0.0")
    port = int(os.getenv("POSTBOARD_PORT", "8000"))
    reload = os.getenv("POSTBOARD_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("postboard.app:app", host=host, port=port, reload=reload, log_config=None)

if __name__ == "__main__":
    main()
