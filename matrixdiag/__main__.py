"""
Matrix Diagnoser — entry point.

Usage:
    python -m matrixdiag topology CONFIG_DIR            # print topology JSON
    python -m matrixdiag diagnose CONFIG_DIR 3,4,17     # explain failing keys
    python -m matrixdiag diagnose CONFIG_DIR 3,4 --db matrix-diagnoser-database.json
    python -m matrixdiag template CONFIG_DIR            # empty reference database
    python -m matrixdiag serve                          # start web server on :8000
    python -m matrixdiag serve --port 3000

Add --verbose to any command to see what the extractors found.
"""

import json
import logging
import sys
from pathlib import Path

USAGE = (
    "Usage: python -m matrixdiag "
    "{topology DIR | diagnose DIR KEYS [--db FILE] | template DIR | "
    "serve [--port PORT] [--host HOST]} [--verbose]"
)


def _option(args: list[str], name: str) -> str | None:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return None


def _fail(msg: str) -> None:
    print(msg, file=sys.stderr)
    sys.exit(1)


def _load_topology(args: list[str]):
    from matrixdiag.sources import load_sources
    from matrixdiag.topology import TopologyError, build_topology

    if len(args) < 2:
        _fail(USAGE)
    root = Path(args[1])
    if not root.is_dir():
        _fail(f"Not a directory: {root}")
    try:
        return root, build_topology(load_sources(root))
    except TopologyError as exc:
        _fail(f"Error: {exc}")


def _parse_keys(text: str) -> list[int]:
    try:
        return [int(k) for k in text.replace(" ", "").split(",") if k]
    except ValueError:
        _fail(f"Invalid key list '{text}' (expected e.g. 3,4,17)")


def main():
    args = sys.argv[1:]
    verbose = "--verbose" in args
    args = [a for a in args if a != "--verbose"]
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    cmd = args[0] if args else "serve"

    if cmd == "topology":
        from matrixdiag.topology import topology_to_dict

        _, topology = _load_topology(args)
        print(json.dumps(topology_to_dict(topology), indent=2))

    elif cmd == "diagnose":
        from matrixdiag.diagnosis import localize_failures, render_reports
        from matrixdiag.reference import DatabaseError, find_database, load_database

        root, topology = _load_topology(args)
        if len(args) < 3:
            _fail(USAGE)
        failing = _parse_keys(args[2])

        db_path = _option(args, "--db")
        path = Path(db_path) if db_path else find_database(root)
        db = None
        if path is not None:
            try:
                db = load_database(path)
            except DatabaseError as exc:
                print(f"Warning: {exc}; using raw pin names", file=sys.stderr)

        print(render_reports(localize_failures(topology, failing), db))

    elif cmd == "template":
        from matrixdiag.reference import database_template

        _, topology = _load_topology(args)
        print(json.dumps(database_template(topology), indent=2))

    elif cmd == "serve":
        port = int(_option(args, "--port") or 8000)
        host = _option(args, "--host") or "127.0.0.1"

        from matrixdiag.web.server import main as serve
        serve(host=host, port=port)

    else:
        print(f"Unknown command: {cmd}")
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    main()
