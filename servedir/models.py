from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Request:
    method: str
    target: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    received_at: int = 0


@dataclass(frozen=True)
class Response:
    status: int
    headers: Tuple[Tuple[str, str], ...] = ()
    body: bytes = b""

    @property
    def reason(self) -> str:
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    def get_header(self, name: str) -> Optional[str]:
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None
