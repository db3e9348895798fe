"""Static asset responder: a path → file lookup table built once at startup.

Usage:
    table = StaticAssetTable()
    table.load_directory_tree("/var/task/public", "/var/task/public", "index.html")
    response = table.handle_alb(event)   # None when the path is not a static asset

Responses are ALB target group responses. Text files are served as-is,
everything else base64 encoded.
"""

import base64
import mimetypes
import os
from dataclasses import dataclass
from http import HTTPStatus
from pathlib import Path
from typing import Any, Optional

import structlog

logger = structlog.get_logger()

CACHE_CONTROL = "public, max-age=604800, immutable"


@dataclass(frozen=True)
class FileDef:
    """A loaded static file."""

    mime_type: str
    contents: str
    path: str
    is_binary: bool

    @classmethod
    def load(cls, file_path: Path, url_path: str) -> "FileDef":
        mime_type = mimetypes.guess_type(file_path.name)[0] or ""
        raw = file_path.read_bytes()
        if mime_type.startswith("text"):
            return cls(mime_type=mime_type, contents=raw.decode("utf-8", errors="replace"), path=url_path, is_binary=False)
        return cls(mime_type=mime_type, contents=base64.b64encode(raw).decode("ascii"), path=url_path, is_binary=True)

    def at(self, url_path: str) -> "FileDef":
        """Same file registered under another URL path."""
        return FileDef(mime_type=self.mime_type, contents=self.contents, path=url_path, is_binary=self.is_binary)

    def raw_bytes(self) -> bytes:
        if self.is_binary:
            return base64.b64decode(self.contents)
        return self.contents.encode("utf-8")


def _url_path(file_path: Path, prefix: str) -> str:
    path = file_path.as_posix()
    prefix = Path(prefix).as_posix() if prefix else ""
    if prefix and path.startswith(prefix):
        path = path[len(prefix):]
    return path


class StaticAssetTable:
    """URL path → FileDef table."""

    def __init__(self):
        self._files: dict[str, FileDef] = {}

    def load_directory_tree(self, base_path: str, prefix: str, index_page: str = "index.html") -> int:
        """Register every file under `base_path`. Returns the number of URL paths registered.

        Each file is keyed by its path with `prefix` removed. Files named
        `index_page` are also served for their directory, with and without
        the trailing slash.
        """
        files: dict[str, FileDef] = {}
        for root, _, names in os.walk(base_path):
            for name in sorted(names):
                file_path = Path(root) / name
                fd = FileDef.load(file_path, _url_path(file_path, prefix))
                files[fd.path] = fd
                if index_page and fd.path.endswith(index_page):
                    directory = fd.path[: -len(index_page)]
                    files[directory] = fd.at(directory)
                    files[directory.rstrip("/")] = fd.at(directory.rstrip("/"))

        self._files = files
        logger.info("static_tree_loaded", base_path=str(base_path), paths=len(files))
        return len(files)

    def lookup(self, path: str) -> Optional[FileDef]:
        return self._files.get(path)

    def handle_alb(self, event: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Answer an ALB request event, or return None to let another handler respond.

        Only GET requests are served.
        """
        if event.get("httpMethod") != "GET":
            return None

        fd = self._files.get(event.get("path", ""))
        if fd is None:
            return None

        status = HTTPStatus.OK
        return {
            "statusCode": status.value,
            "statusDescription": f"{status.value} {status.phrase}",
            "body": fd.contents,
            "isBase64Encoded": fd.is_binary,
            "headers": {
                "Content-Type": fd.mime_type,
                "Cache-Control": CACHE_CONTROL,
            },
        }

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: object) -> bool:
        return path in self._files


# Module-level default table
static_assets = StaticAssetTable()


def load_directory_tree(base_path: str, prefix: str, index_page: str = "index.html") -> int:
    return static_assets.load_directory_tree(base_path, prefix, index_page)


def handle_static_alb(event: dict[str, Any]) -> Optional[dict[str, Any]]:
    return static_assets.handle_alb(event)
