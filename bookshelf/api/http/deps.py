"""FastAPI dependency implementations."""

import asyncio
from collections.abc import AsyncIterator, Iterator
from threading import Event

from fastapi import Depends, Request
from loguru import logger
from sqlmodel import Session
from starlette.types import Receive

from bookshelf.api.http.app_data import ApplicationDependencies
from bookshelf.core.services import CatalogService, Clock


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


async def watch_disconnect(receive: Receive, disconnected: Event) -> None:
    """Set ``disconnected`` once the server reports the client has gone."""
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            logger.info("Client disconnected; cancelling in-flight work")
            disconnected.set()
            return


async def get_disconnect_event(request: Request) -> AsyncIterator[Event]:
    """Watch the connection in the background for the life of the request.

    The body has already been read when dependencies run, so the only
    messages left on ``receive`` are disconnect notifications.
    """
    disconnected = Event()
    watcher = asyncio.create_task(watch_disconnect(request.receive, disconnected))
    try:
        yield disconnected
    finally:
        watcher.cancel()


def get_db_session(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> Iterator[Session]:
    """Yield a session from the shared pool, closed when the request finishes."""
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_clock(app_deps: ApplicationDependencies = Depends(get_app_dependencies)) -> Clock:
    return app_deps.clock


def get_catalog_service(
    session: Session = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
    disconnected: Event = Depends(get_disconnect_event),
) -> CatalogService:
    """Get the catalog access layer bound to this request's session."""
    return CatalogService(session, clock=clock, disconnected=disconnected)
