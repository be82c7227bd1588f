#!/usr/bin/env python3

import sys

import uvicorn

from publish.config import config
from publish.main import create_app


def parse_port(argv: list[str]) -> int:
    """Return the TCP port given as the only argument.  Raises ValueError."""
    if len(argv) != 2:
        raise ValueError(f"Usage: {argv[0] if argv else 'publish'} <port>")
    raw = argv[1]
    if not (raw.isascii() and raw.isdigit()):
        raise ValueError(f"invalid port: {raw!r}")
    port = int(raw)
    if not 0 <= port <= 65535:
        raise ValueError(f"invalid port: {port}")
    return port


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv if argv is None else argv
    try:
        port = parse_port(argv)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=port,
        log_level="debug" if config.debug else "info",
    )


if __name__ == "__main__":
    main()
