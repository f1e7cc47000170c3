"""
Startup script for the API.

Usage:
    cyberintel-serve                   # create tables, start uvicorn on $PORT (8000)
    cyberintel-serve --seed            # also load the built-in sample dataset
    cyberintel-serve --reload          # auto-reload for local development
"""

import argparse
import asyncio
import logging
import os
import sys

logger = logging.getLogger(__name__)


async def prepare_database(seed: bool):
    from cyberintel.database import init_db

    await init_db()
    if seed:
        from cyberintel.seed import run

        await run()


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    parser = argparse.ArgumentParser(description="Start the CyberIntel API")
    parser.add_argument("--host", default=os.environ.get("HOST", "0.0.0.0"))
    parser.add_argument("--port", default=os.environ.get("PORT", "8000"))
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument("--seed", action="store_true", help="Load sample data before starting")
    args = parser.parse_args()

    logger.info("Preparing database ...")
    try:
        asyncio.run(prepare_database(args.seed))
    except Exception as e:
        logger.error("Database preparation failed: %s", e)
        sys.exit(1)

    cmd = [sys.executable, "-m", "uvicorn", "cyberintel.app:app",
           "--host", args.host, "--port", str(args.port)]
    if args.reload:
        cmd.append("--reload")
    logger.info("Starting API on %s:%s", args.host, args.port)
    os.execvp(sys.executable, cmd)


if __name__ == "__main__":
    main()
