"""Run a single N1QL statement through the connection adapter.

Connection settings come from CB_* environment variables (see
``n1ql_adapter.config``).
"""

import argparse
import json
import logging
import sys

from n1ql_adapter.config import get_log_level, load_config
from n1ql_adapter.db.connection import CouchbaseConnection
from n1ql_adapter.errors import N1qlAdapterError

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="n1ql-adapter", description=__doc__)
    parser.add_argument("statement", help="N1QL statement with ? placeholders")
    parser.add_argument("--bucket", required=True, help="Bucket to run against")
    parser.add_argument(
        "--arg",
        action="append",
        default=[],
        dest="args",
        help="Positional binding as JSON (repeatable, in placeholder order)",
    )
    parser.add_argument(
        "--mode",
        choices=["select", "statement", "affecting"],
        default="select",
        help="Execution verb (default: select)",
    )
    parser.add_argument(
        "--pretend",
        action="store_true",
        help="Print the statement without running it (still connects to the cluster)",
    )
    return parser.parse_args(argv)


def _decode_bindings(raw_args: list[str]) -> list[object]:
    """Decode each --arg as JSON, falling back to the raw string."""
    bindings: list[object] = []
    for raw in raw_args:
        try:
            bindings.append(json.loads(raw))
        except json.JSONDecodeError:
            bindings.append(raw)
    return bindings


def main(argv: list[str] | None = None) -> int:
    """Entry point for the n1ql-adapter command."""
    logging.basicConfig(
        level=getattr(logging, get_log_level()),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    args = _parse_args(argv)
    bindings = _decode_bindings(args.args)

    try:
        conn = CouchbaseConnection(load_config()).bucket(args.bucket)
        if args.pretend:
            with conn.pretend() as log:
                _run(conn, args.mode, args.statement, bindings)
            output: object = [entry.model_dump() for entry in log]
        else:
            output = _run(conn, args.mode, args.statement, bindings)
    except N1qlAdapterError as e:
        logger.debug("Statement failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(output, indent=2, default=str))
    return 0


def _run(conn: CouchbaseConnection, mode: str, statement: str, bindings: list[object]) -> object:
    if mode == "statement":
        return conn.statement(statement, bindings)
    if mode == "affecting":
        return conn.affecting_statement(statement, bindings)
    return conn.select(statement, bindings)


if __name__ == "__main__":
    sys.exit(main())
