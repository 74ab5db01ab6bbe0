import asyncio
import logging
import socket
from email.utils import formatdate
from typing import Dict
from urllib.parse import unquote

from .handler import now_ms
from .models import Request, Response

logger = logging.getLogger(__name__)


class BadRequest(Exception):
    pass


class Engine:
    async def handle_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            await self.process(reader, writer)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def process(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        raise NotImplementedError


class HTTPEngine(Engine):
    def __init__(self, config, request_handler, server_name=None) -> None:
        self.config = config
        self.request_handler = request_handler
        if server_name is None:
            server_name = f"serve-dir/{socket.gethostname()}"
        self.server_name = server_name

    async def process(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        logger.debug("handling connection from %s", peer)
        try:
            raw = await asyncio.wait_for(self._read_headers(reader), self.config.recv_timeout)
            if raw is None:
                return
            req = self._parse_request(raw)
        except (asyncio.TimeoutError, ConnectionError):
            logger.debug("connection from %s timed out or was reset", peer)
            return
        except BadRequest as e:
            logger.debug("bad request from %s: %s", peer, e)
            await self._send(writer, "GET", self._simple_response(400, b"Bad Request"))
            return

        try:
            resp = await self.request_handler.handle(req)
            await self._send(writer, req.method, resp)
        except ConnectionError:
            logger.debug("connection from %s was reset", peer)
        except Exception:
            logger.exception("unhandled error serving %s", peer)
            await self._send(writer, "GET", self._simple_response(500, b"Internal Server Error"))

    async def _read_headers(self, reader: asyncio.StreamReader) -> bytes | None:
        buf = bytearray()
        while True:
            if b"\r\n\r\n" in buf:
                return bytes(buf)
            if len(buf) > self.config.max_header_bytes:
                raise BadRequest("request head too large")
            chunk = await reader.read(self.config.chunk_size)
            if chunk == b"":
                return None
            buf.extend(chunk)

    def _parse_request(self, raw: bytes) -> Request:
        received_at = now_ms()
        request_line, *field_lines = raw.split(b"\r\n\r\n", 1)[0].decode("iso-8859-1").split("\r\n")

        try:
            method, target, version = request_line.split()
        except ValueError:
            raise BadRequest(f"bad request line {request_line!r}")
        if not version.startswith("HTTP/"):
            raise BadRequest(f"bad http version {version!r}")

        return Request(
            method=method,
            target=target,
            path=self._request_path(target),
            version=version,
            headers=self._parse_fields(field_lines),
            received_at=received_at,
        )

    @staticmethod
    def _parse_fields(lines) -> Dict[str, str]:
        fields = {}
        for line in lines:
            name, sep, value = line.partition(":")
            if sep:
                fields[name.strip().lower()] = value.strip()
        return fields

    @staticmethod
    def _request_path(target: str) -> str:
        # query is not part of file resolution
        return unquote(target.partition("?")[0])

    async def _send(self, writer: asyncio.StreamWriter, method: str, resp: Response) -> None:
        headers = list(resp.headers)
        present = {k.lower() for k, _ in headers}
        for name, value in (
            ("Date", formatdate(usegmt=True)),
            ("Server", self.server_name),
            ("Connection", "close"),
            ("Content-Length", str(len(resp.body))),
        ):
            if name.lower() not in present:
                headers.append((name, value))

        writer.write(self._encode_head(resp, headers))
        if method != "HEAD":
            self._write_body(writer, resp.body)
        await writer.drain()

    @staticmethod
    def _encode_head(resp: Response, headers) -> bytes:
        lines = [f"HTTP/1.1 {resp.status} {resp.reason}"]
        lines.extend(f"{k}: {v}" for k, v in headers)
        # configured values may fall outside latin-1
        return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")

    def _write_body(self, writer: asyncio.StreamWriter, body: bytes) -> None:
        view = memoryview(body)
        for start in range(0, len(view), self.config.chunk_size):
            writer.write(view[start:start + self.config.chunk_size])

    def _simple_response(self, status: int, body: bytes) -> Response:
        return Response(status, headers=self.config.headers + (("Content-Type", "text/plain; charset=utf-8"),), body=body)
