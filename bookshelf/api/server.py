"""Runs the ASGI app under uvicorn with bounded graceful shutdown."""

import signal
from types import FrameType

import uvicorn
from fastapi import FastAPI
from loguru import logger

from bookshelf.runtime.config.config_data import AppConfig

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def build_server(app: FastAPI, app_config: AppConfig) -> uvicorn.Server:
    """Create a uvicorn server honouring the configured timeouts.

    On SIGINT/SIGTERM uvicorn closes the listening socket, lets in-flight
    requests run for up to ``graceful_timeout`` seconds, then cancels them.
    """
    config = uvicorn.Config(
        app,
        host=app_config.host,
        port=app_config.port,
        lifespan="on",
        access_log=False,  # Request logging happens in middleware
        log_config=None,  # Keep the Loguru intercept in place
        timeout_keep_alive=int(app_config.idle_timeout),
        timeout_graceful_shutdown=app_config.graceful_timeout,
    )
    return uvicorn.Server(config)


def _swallow_replayed_signal(signum: int, _frame: FrameType | None) -> None:
    # uvicorn re-raises the captured signal once shutdown has finished
    logger.debug("Signal {} received after shutdown", signal.Signals(signum).name)


def run_server(server: uvicorn.Server) -> int:
    """Serve until a shutdown signal; return the process exit code."""
    previous = {sig: signal.signal(sig, _swallow_replayed_signal) for sig in SHUTDOWN_SIGNALS}
    logger.info(
        "Listening on {}:{} (graceful timeout {}s)",
        server.config.host,
        server.config.port,
        server.config.timeout_graceful_shutdown,
    )
    try:
        server.run()
    except SystemExit as exc:
        # uvicorn exits this way when the socket cannot be bound
        logger.error("Server failed to start")
        return exc.code if isinstance(exc.code, int) and exc.code else 1
    except KeyboardInterrupt:
        pass
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    if not server.started:
        logger.error("Application startup failed")
        return 1

    logger.info("Server stopped")
    return 0
