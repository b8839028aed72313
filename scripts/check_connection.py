#!/usr/bin/env python3
"""Quick check that a database is reachable and answers a query.

Usage:
    python scripts/check_connection.py [--host H] [--port P] [--dbname D] [--user U]
    python scripts/check_connection.py --backend sqlite --dbname /tmp/test.db \\
        --query "SELECT ? + ?" 1 2

The password is read from PGPASSWORD by the driver when not given.
"""

import argparse
import logging
import sys

from pgtext import Connection, Failure
from pgtext.client import create_client
from pgtext.config import get_log_level


def main() -> int:
    """Open a connection, run one query and print its rows."""
    parser = argparse.ArgumentParser(description="Check database connectivity")
    parser.add_argument("--backend", default=None, help="postgres or sqlite (default: env)")
    parser.add_argument("--host", default="")
    parser.add_argument("--port", default="")
    parser.add_argument("--dbname", default="")
    parser.add_argument("--user", default="")
    parser.add_argument("--password", default="")
    parser.add_argument("--query", default="SELECT 1", help="query template with ? placeholders")
    parser.add_argument("args", nargs="*", help="values substituted for ? in --query")
    opts = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, get_log_level()),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    client = create_client(opts.backend)
    opened = Connection.open(
        opts.host, opts.port, opts.dbname, opts.user, opts.password, client=client
    )
    if isinstance(opened, Failure):
        print(f"  Connection failed: {opened.message.strip()}")
        return 1
    conn = opened.value
    print("Connected.")

    queried = conn.query(opts.query, *opts.args)
    if isinstance(queried, Failure):
        print(f"  Query failed: {queried.message.strip()}")
        return 1

    with queried.value as cursor:
        print(f"{cursor.total_rows} row(s), {cursor.column_count} column(s)")
        cursor.each_row(lambda row: print("  " + " | ".join(row)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
