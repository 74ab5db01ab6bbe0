from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Tuple

DEFAULT_HEADERS: Tuple[Tuple[str, str], ...] = (("access-control-allow-origin", "*"),)


class HeaderMap:
    """Insertion-ordered header mapping with unique, case-sensitive names.

    Overwriting a known name keeps its first-seen position.
    """

    def __init__(self, pairs: Iterable[Tuple[str, str]] = ()) -> None:
        self._items: Dict[str, str] = {}
        for name, value in pairs:
            self.update(name, value)

    def update(self, name: str, value: str) -> bool:
        replaced = name in self._items
        self._items[name] = value
        return replaced

    def setdefault(self, name: str, value: str) -> str:
        return self._items.setdefault(name, value)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._items.items())

    def freeze(self) -> Tuple[Tuple[str, str], ...]:
        return tuple(self.items())

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"HeaderMap({list(self._items.items())!r})"


def build_headers(pairs: Iterable[Tuple[str, str]], no_default_headers: bool = False) -> Tuple[Tuple[str, str], ...]:
    headers = HeaderMap(pairs)
    if not no_default_headers:
        # explicit entries win over defaults
        for name, value in DEFAULT_HEADERS:
            headers.setdefault(name, value)
    return headers.freeze()


def normalize_root(path: str) -> str:
    if not path.endswith("/") and not path.endswith("\\"):
        path += "/"
    return path


@dataclass(frozen=True)
class Config:
    root: str = "./"
    headers: Tuple[Tuple[str, str], ...] = DEFAULT_HEADERS
    not_found_file: Optional[str] = None
    host: str = "127.0.0.1"
    port: int = 8080
    backlog: int = 128
    recv_timeout: float = 2.0
    max_header_bytes: int = 65536
    chunk_size: int = 64 * 1024
    debug: bool = False
