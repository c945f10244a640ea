from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection
from websockets.http11 import Request, Response

from contracts.ui_protocol import EVENT_HELLO, EVENT_SESSION

from .config import UIServerConfig
from .events import EventJournal, NowFn, make_event
from .routes import HttpRoutes

MessageHandler = Callable[[str], None]


class UIServer:
    """Serves the session page and relays events and intents over one websocket path.

    The asyncio loop runs on its own daemon thread. `publish` may be called
    from any thread; incoming messages are handed to the message handler on
    the server thread, which is expected to only enqueue them.
    """

    def __init__(
        self,
        config: UIServerConfig,
        logger: Optional[logging.Logger] = None,
        *,
        on_message: Optional[MessageHandler] = None,
        now_fn: Optional[NowFn] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("ui_server")
        self._on_message = on_message
        self._journal = EventJournal(now_fn=now_fn)
        self._routes = HttpRoutes(
            Path(config.index_file).read_bytes(),
            lambda: self._journal.latest_payload(EVENT_SESSION),
        )
        self._clients: set[ServerConnection] = set()
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._shutdown: Optional[asyncio.Event] = None
        self._ready = threading.Event()
        self._failure: Optional[Exception] = None

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and self._failure is None

    def set_message_handler(self, handler: Optional[MessageHandler]) -> None:
        self._on_message = handler

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._failure = None
        self._ready.clear()
        self._thread = threading.Thread(
            target=self._thread_main,
            name="ui-server",
            daemon=True,
        )
        self._thread.start()

        if not self._ready.wait(timeout_seconds):
            raise RuntimeError(f"UI server did not start within {timeout_seconds:.1f}s")
        if self._failure is not None:
            raise RuntimeError(f"UI server startup failed: {self._failure}") from self._failure

    def stop(self, timeout_seconds: float = 5.0) -> None:
        thread = self._thread
        if thread is None:
            return

        loop, shutdown = self._loop, self._shutdown
        if loop is not None and shutdown is not None:
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(shutdown.set)

        thread.join(timeout=timeout_seconds)
        if thread.is_alive():
            self._logger.error("UI server thread did not stop within %.1fs", timeout_seconds)
        self._thread = None

    def publish(self, event_type: str, **payload) -> None:
        message = self._journal.record(event_type, payload)
        loop = self._loop
        if loop is None or not self.is_running:
            return

        try:
            future = asyncio.run_coroutine_threadsafe(self._broadcast(message), loop)
        except RuntimeError:
            # Loop closed between the check and the call.
            return
        future.add_done_callback(self._log_broadcast_failure)

    def _log_broadcast_failure(self, future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self._logger.warning("Broadcast failed: %s", error)

    def _thread_main(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        try:
            loop.run_until_complete(self._serve())
        except Exception as error:  # pragma: no cover - exercised manually
            self._failure = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
        finally:
            self._ready.set()
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            with contextlib.suppress(Exception):
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self._loop = None
            self._shutdown = None
            loop.close()

    async def _serve(self) -> None:
        self._shutdown = asyncio.Event()
        async with websockets.serve(
            self._handle_client,
            host=self._config.host,
            port=self._config.port,
            process_request=self._route_http,
            logger=self._logger,
        ):
            self._logger.info(
                "UI server listening on %s (websocket: %s)",
                self._config.http_url,
                self._config.websocket_path,
            )
            self._ready.set()
            await self._shutdown.wait()
            await self._disconnect_all()

    async def _handle_client(self, websocket: ServerConnection) -> None:
        request = websocket.request
        path = urlsplit(request.path).path if request is not None else ""
        if path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        self._clients.add(websocket)
        self._logger.info("Client connected: %s", websocket.remote_address)
        try:
            await websocket.send(make_event(EVENT_HELLO, message="UI websocket connected"))
            for message in self._journal.replay():
                await websocket.send(message)
            async for message in websocket:
                self._dispatch_message(message)
        except websockets.exceptions.ConnectionClosed:
            self._logger.info("Client disconnected: %s", websocket.remote_address)
        finally:
            self._clients.discard(websocket)

    def _dispatch_message(self, message: str | bytes) -> None:
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")
        self._logger.debug("Received from UI: %s", message)
        if self._on_message is None:
            return
        try:
            self._on_message(message)
        except Exception as error:
            self._logger.error("UI message handler failed: %s", error, exc_info=True)

    async def _route_http(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        del connection
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None
        return self._routes.resolve(path)

    async def _disconnect_all(self) -> None:
        clients = tuple(self._clients)
        self._clients.clear()
        if clients:
            await asyncio.gather(
                *(client.close(code=1001, reason="Server shutting down") for client in clients),
                return_exceptions=True,
            )

    async def _broadcast(self, message: str) -> None:
        clients = tuple(self._clients)
        if not clients:
            return

        results = await asyncio.gather(
            *(client.send(message) for client in clients),
            return_exceptions=True,
        )
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                self._clients.discard(client)
                self._logger.warning("Dropping client after failed send: %s", result)
