from __future__ import annotations

import argparse

import uvicorn

from backend.app.config import HOST, LOG_LEVEL, PORT


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Serve the PDF export API.")
    ap.add_argument("--host", type=str, default=HOST, help="Bind address")
    ap.add_argument("--port", type=int, default=PORT, help="Bind port")
    ap.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    args = ap.parse_args(argv)

    # One worker: the export busy guard lives in process memory.
    uvicorn.run(
        "backend.app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=1,
        log_level=LOG_LEVEL.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
