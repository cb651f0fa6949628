"""Command line entry point: check a configuration file and serve it."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from webservpy.check_config import load_config
from webservpy.webserver import WebServer

PROG = "webservpy"


def main(argv: Sequence[str] | None = None) -> int:
    """Load the configuration named on the command line and run the server."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print(f"Usage: {PROG} <config_file>", file=sys.stderr)
        return 1
    try:
        servers = load_config(args[0])
        print("Configuration loaded successfully")
        with WebServer(servers) as server:
            server.open_sockets()
            server.serve_forever()
    except (ValueError, OSError) as exc:
        print(exc, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())