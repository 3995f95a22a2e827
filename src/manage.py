"""Storefront database management CLI.

Creates and drops the database schema when the domain is configured with a
relational provider (e.g. ``PROTEAN_ENV=sqlite``). The default memory
provider needs no schema.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Creating storefront database schema...")
    setup_db(storefront)
    print("Done.")


def drop_database():
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Dropping storefront database schema...")
    drop_db(storefront)
    print("Done.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront database management")
    parser.add_argument("command", choices=["setup-db", "drop-db"])
    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    else:
        drop_database()
    return 0


if __name__ == "__main__":
    sys.exit(main())
