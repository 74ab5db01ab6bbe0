import asyncio
import logging
import os
import re
import time
from typing import Optional, Tuple

from .config import Config
from .models import Request, Response

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"
NOT_FOUND_BODY = b"404 Not Found"
INVALID_PATH_BODY = b"Invalid Path"
SERVER_ERROR_BODY = b"Something Went Wrong :("

_SEGMENT_SPLIT = re.compile(r"[/\\]")


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def _read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


class FileHandler:
    def __init__(self, config: Config) -> None:
        self.config = config

    async def handle(self, req: Request) -> Response:
        received_at = req.received_at or now_ms()
        method = req.method

        if method == "GET":
            resp, note = await self._get(req)
            if resp is not None:
                self._log(received_at, resp.status, method, req.target, note)
                return resp
        elif method == "OPTIONS":
            resp = Response(200, headers=self.config.headers)
            self._log(received_at, 200, method, req.target, "preflight")
            return resp

        resp = await self._not_found()
        self._log(received_at, 404, method, req.target, "requested address not found")
        return resp

    async def _get(self, req: Request) -> Tuple[Optional[Response], str]:
        """Serve a GET. Returns (None, "") when nothing matched."""
        rel = req.path[1:] if req.path.startswith("/") else req.path
        if not rel:
            rel = INDEX_FILE

        if not self._is_valid(rel):
            return self._response(403, INVALID_PATH_BODY), "requested invalid path"

        file_path = self.config.root + rel
        if not os.path.isfile(file_path):
            return None, ""

        try:
            body = await asyncio.to_thread(_read_file, file_path)
        except OSError as e:
            return self._response(500, SERVER_ERROR_BODY), str(e)
        return self._response(200, body), "requested file path"

    async def _not_found(self) -> Response:
        path = self.config.not_found_file
        if path:
            try:
                body = await asyncio.to_thread(_read_file, path)
            except OSError:
                logger.debug("not found file %s is unreadable", path)
            else:
                return self._response(404, body, ("Content-Type", "text/html"))
        return self._response(404, NOT_FOUND_BODY, ("Content-Type", "text/plain"))

    @staticmethod
    def _is_valid(rel: str) -> bool:
        if rel.startswith("."):
            return False
        return ".." not in _SEGMENT_SPLIT.split(rel)

    def _response(self, status: int, body: bytes, *extra: Tuple[str, str]) -> Response:
        return Response(status, headers=self.config.headers + extra, body=body)

    @staticmethod
    def _log(received_at: int, status: int, method: str, target: str, note: str) -> None:
        logger.info("%d: [%d] [%s] %s %s", received_at, status, method, target, note)
