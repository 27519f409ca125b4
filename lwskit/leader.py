"""Leader entry point that starts llama-server with the group's workers as RPC backends."""

from __future__ import annotations

import argparse
import logging
import os
import re
import socket
import subprocess
import sys
import time
from collections.abc import Callable, Iterable, Mapping, Sequence

from lwskit.api import LWS_GROUP_SIZE, LWS_LEADER_ADDRESS

logger = logging.getLogger(__name__)

RPC_PORT = 50052
SERVER_BINARY = "/llama-server"
MAX_LOOKUP_ATTEMPTS = 10
LOOKUP_RETRY_DELAY = 3.0

_INTEGER = re.compile(r"[+-]?[0-9]+")


class LeaderError(Exception):
    """Raised when the leader cannot prepare or run the server."""


def group_size_from_env(environ: Mapping[str, str]) -> int:
    """Read the group size from the environment, defaulting to 1."""
    text = environ.get(LWS_GROUP_SIZE, "")
    if not text:
        return 1
    if not _INTEGER.fullmatch(text):
        raise LeaderError(f"parsing {LWS_GROUP_SIZE}={text!r}, expected integer")
    return int(text)


def worker_hosts(leader_address: str, size: int) -> list[str]:
    """Host names of the workers 1..size-1 derived from the leader's address."""
    first, *rest = leader_address.split(".")
    domain = ".".join(rest)
    return [f"{first}-{index}.{domain}" for index in range(1, size)]


def _lookup_ip(host: str) -> list[str]:
    addresses: list[str] = []
    for *_, sockaddr in socket.getaddrinfo(host, None):
        ip = sockaddr[0]
        if ip not in addresses:
            addresses.append(ip)
    return addresses


def resolve_host(
    host: str,
    max_attempts: int = MAX_LOOKUP_ATTEMPTS,
    delay: float = LOOKUP_RETRY_DELAY,
    lookup: Callable[[str], Sequence[str]] | None = None,
) -> str:
    """Resolve ``host`` to its first IP address, retrying failed lookups."""
    lookup = _lookup_ip if lookup is None else lookup
    attempt = 0
    while True:
        attempt += 1
        try:
            ips = list(lookup(host))
        except OSError as err:
            if attempt >= max_attempts:
                raise LeaderError(f"looking up host {host!r}: {err}") from err
            logger.warning("retrying lookup of host %r: %s", host, err)
            time.sleep(delay)
            continue
        if not ips:
            raise LeaderError(f"host {host!r} resolved, but did not return IPs")
        logger.info("resolved host %r to %s", host, ips)
        return str(ips[0])


def build_server_args(model: str, rpc_hosts: Iterable[str], extra_args: Iterable[str]) -> list[str]:
    """Command-line arguments for llama-server."""
    return [
        "--model",
        model,
        "--host",
        "0.0.0.0",
        "--rpc",
        ",".join(rpc_hosts),
        *extra_args,
    ]


def main(argv: list[str] | None = None) -> int:
    """Resolve the workers, run llama-server and return the process exit status."""
    try:
        default_size = group_size_from_env(os.environ)
    except LeaderError as err:
        print(err, file=sys.stderr)
        return 1

    parser = argparse.ArgumentParser(description="Start llama-server on a group leader.")
    parser.add_argument(
        "--lws-size", type=int, default=default_size, help="number of LeaderWorkerSet workers"
    )
    parser.add_argument(
        "--llm-model", default=os.environ.get("LLM_MODEL", ""), help="path to LLM model"
    )
    parser.add_argument("-v", "--verbosity", type=int, default=0, help="log level verbosity")
    parser.add_argument("server_args", nargs="*", help="extra arguments for llama-server")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbosity >= 2 else logging.INFO)

    leader_address = os.environ.get(LWS_LEADER_ADDRESS, "")
    try:
        rpc_hosts = [
            f"{resolve_host(host)}:{RPC_PORT}"
            for host in worker_hosts(leader_address, args.lws_size)
        ]
    except LeaderError as err:
        print(err, file=sys.stderr)
        return 1

    server_args = build_server_args(args.llm_model, rpc_hosts, args.server_args)
    logger.info("starting llama-server with args: %s", server_args)

    try:
        process = subprocess.Popen([SERVER_BINARY, *server_args])
    except OSError as err:
        print(f"starting llama-server: {err}", file=sys.stderr)
        return 1
    code = process.wait()
    if code != 0:
        print(f"llama-server exited with error: exit status {code}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())