import asyncio
import logging
import socket
from typing import List, Optional

from .config import Config
from .engine import Engine, HTTPEngine
from .handler import FileHandler

logger = logging.getLogger(__name__)


class AsyncHTTPServer:
    def __init__(self, config: Config) -> None:
        self.config = config

        # Created on start()
        self._server: Optional[asyncio.base_events.Server] = None
        self._engine: Optional[Engine] = None

    @property
    def sockets(self) -> List[socket.socket]:
        if self._server is None:
            return []
        return list(self._server.sockets)

    def run(self) -> None:
        try:
            asyncio.run(self.serve_forever())
        except KeyboardInterrupt:
            logger.info("Shutting down")

    async def start(self) -> None:
        """
        Create/bind/listen.
        asyncio spawns one task per accepted connection.
        """
        self._engine = HTTPEngine(self.config, FileHandler(self.config))
        self._server = await asyncio.start_server(
            self._on_connection,
            host=self.config.host,
            port=self.config.port,
            backlog=self.config.backlog,
            reuse_address=True,
        )
        for sock in self._server.sockets:
            host, port = sock.getsockname()[:2]
            logger.info("Serving %s at %s:%d", self.config.root, host, port)

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        assert self._server is not None
        try:
            await self._server.serve_forever()
        finally:
            await self.stop()

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
        self._server = None
        self._engine = None

    async def _on_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        assert self._engine is not None
        sock = writer.get_extra_info("socket")
        if sock is not None:
            try:
                sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            except OSError:
                pass
        await self._engine.handle_connection(reader, writer)
