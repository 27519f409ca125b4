"""A small HTTP server that hands out cached model blobs by their hash."""

from __future__ import annotations

import argparse
import html
import logging
import mimetypes
import os
import shutil
import sys
import urllib.parse
from email.utils import formatdate
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_LISTEN = ":9999"
DEFAULT_BASE_DIR = "~/.cache/blobserver/blobs"


def expand_base_dir(base_dir: str) -> str:
    """Replace a leading ``~/`` with the user's home directory."""
    if not base_dir.startswith("~/"):
        return base_dir
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as err:
        raise RuntimeError(f"getting home directory: {err}") from err
    return os.path.join(str(home), base_dir[2:])


def _parse_address(address: Any) -> tuple[str, int]:
    if isinstance(address, tuple):
        host, port = address
        return str(host), int(port)
    if not isinstance(address, str):
        raise TypeError(f"address must be a string or a (host, port) tuple, got {address!r}")
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address {address!r}")
    return host.strip("[]"), int(port)


def _contains_dot_dot(path: str) -> bool:
    if ".." not in path:
        return False
    return any(part == ".." for part in path.replace("\\", "/").split("/"))


class _BlobServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], base_dir: str) -> None:
        super().__init__(address, BlobRequestHandler)
        self.base_dir = base_dir
        self.redirects: dict[str, str] = {}


class BlobRequestHandler(BaseHTTPRequestHandler):
    """Serves ``GET /<hash>`` from the server's base directory."""

    server_version = "blobserver"

    def do_GET(self) -> None:
        self._dispatch("GET")

    def do_HEAD(self) -> None:
        self._dispatch("HEAD")

    def do_POST(self) -> None:
        self._dispatch("POST")

    def do_PUT(self) -> None:
        self._dispatch("PUT")

    def do_DELETE(self) -> None:
        self._dispatch("DELETE")

    def do_PATCH(self) -> None:
        self._dispatch("PATCH")

    def do_OPTIONS(self) -> None:
        self._dispatch("OPTIONS")

    def log_message(self, format: str, *args: Any) -> None:
        logger.info("%s - %s", self.address_string(), format % args)

    @property
    def _url_path(self) -> str:
        return urllib.parse.unquote(urllib.parse.urlsplit(self.path).path)

    def _dispatch(self, method: str) -> None:
        path = self._url_path
        tokens = (path[1:] if path.startswith("/") else path).split("/")
        if len(tokens) == 1:
            if method == "GET":
                self._serve_blob(tokens[0])
                return
            self._error(HTTPStatus.METHOD_NOT_ALLOWED, "method not allowed")
            return
        self._error(HTTPStatus.NOT_FOUND, "not found")

    def _serve_blob(self, blob_hash: str) -> None:
        path = os.path.join(self.server.base_dir, blob_hash)
        try:
            os.stat(path)
        except FileNotFoundError:
            target = self.server.redirects.get(blob_hash)
            if target is not None:
                logger.info("redirecting blob %r to %r", blob_hash, target)
                self._redirect(HTTPStatus.FOUND, target)
            else:
                logger.info("blob %r not found", path)
                self._error(HTTPStatus.NOT_FOUND, "not found")
            return
        except OSError as err:
            logger.warning("unable to get stat(%r): %s", path, err)
            self._error(HTTPStatus.INTERNAL_SERVER_ERROR, "internal server error")
            return

        logger.info("serving blob %r", path)
        self._serve_file(path)

    def _serve_file(self, path: str) -> None:
        url_path = self._url_path
        if _contains_dot_dot(url_path):
            self._error(HTTPStatus.BAD_REQUEST, "invalid URL path")
            return
        if os.path.isdir(path):
            if not url_path.endswith("/"):
                self._redirect(HTTPStatus.MOVED_PERMANENTLY, os.path.basename(url_path) + "/")
                return
            self._list_directory(path)
            return
        try:
            handle = open(path, "rb")
        except FileNotFoundError:
            self._error(HTTPStatus.NOT_FOUND, "404 page not found")
            return
        except PermissionError:
            self._error(HTTPStatus.FORBIDDEN, "403 Forbidden")
            return
        except OSError:
            self._error(HTTPStatus.INTERNAL_SERVER_ERROR, "500 Internal Server Error")
            return
        with handle:
            stat = os.fstat(handle.fileno())
            content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(stat.st_size))
            self.send_header("Last-Modified", formatdate(stat.st_mtime, usegmt=True))
            self.end_headers()
            shutil.copyfileobj(handle, self.wfile)

    def _list_directory(self, path: str) -> None:
        try:
            entries = sorted(os.scandir(path), key=lambda entry: entry.name)
        except OSError:
            self._error(HTTPStatus.INTERNAL_SERVER_ERROR, "Error reading directory")
            return
        lines = ["<!doctype html>", '<meta name="viewport" content="width=device-width">', "<pre>"]
        for entry in entries:
            name = entry.name + ("/" if entry.is_dir() else "")
            href = urllib.parse.quote(name)
            lines.append(f'<a href="{href}">{html.escape(name)}</a>')
        lines.append("</pre>")
        body = ("\n".join(lines) + "\n").encode("utf-8")
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _redirect(self, status: HTTPStatus, location: str) -> None:
        self.send_response(status)
        self.send_header("Location", location)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def _error(self, status: HTTPStatus, message: str) -> None:
        body = (message + "\n").encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("X-Content-Type-Options", "nosniff")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)


def make_server(address: Any, base_dir: str) -> _BlobServer:
    """Create a threaded blob server bound to ``address`` serving ``base_dir``.

    ``address`` is either ``"host:port"`` (the host may be empty) or a
    ``(host, port)`` tuple. Blobs that are missing locally can be redirected
    elsewhere by filling the returned server's ``redirects`` mapping.
    """
    return _BlobServer(_parse_address(address), base_dir)


def _redirect_entry(text: str) -> tuple[str, str]:
    blob_hash, sep, target = text.partition("=")
    if not sep or not blob_hash or not target:
        raise argparse.ArgumentTypeError(f"expected HASH=URL, got {text!r}")
    return blob_hash, target


def main(argv: list[str] | None = None) -> int:
    """Serve blobs until interrupted; returns the process exit status."""
    parser = argparse.ArgumentParser(description="Serve cached blobs by hash.")
    parser.add_argument(
        "--redirect",
        action="append",
        default=[],
        type=_redirect_entry,
        metavar="HASH=URL",
        help="redirect a blob missing from the cache to URL",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    try:
        base_dir = expand_base_dir(DEFAULT_BASE_DIR)
        server = make_server(DEFAULT_LISTEN, base_dir)
    except (RuntimeError, OSError, ValueError) as err:
        print(f"serving on {DEFAULT_LISTEN!r}: {err}" if isinstance(err, OSError) else err,
              file=sys.stderr)
        return 1
    server.redirects.update(dict(args.redirect))

    logger.info("serving on %r", DEFAULT_LISTEN)
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())