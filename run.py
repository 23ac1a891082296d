"""Entry point for the dashboard API.

Launches the FastAPI application with uvicorn.  Host and port are read
from the environment variables ``ADMIN_HOST`` and ``ADMIN_PORT``
(defaults ``0.0.0.0`` and ``8000``); everything else is configured
through ``wedding_planner_api.app.core.config``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from wedding_planner_api.app.main import app


async def run_api() -> None:
    """Serve the API until interrupted."""
    host = os.getenv("ADMIN_HOST", "0.0.0.0")
    port = int(os.getenv("ADMIN_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


async def main() -> None:
    try:
        await run_api()
    except Exception:
        logging.exception("API server stopped with an error")
        raise


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
