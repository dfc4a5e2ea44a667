"""Command that opens the database, migrates it and serves the HTTP API."""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping, Sequence

from .api import Handler
from .commodity import CommodityService
from .database import DEFAULT_MIGRATIONS_DIR, Database
from .solar_system import SolarSystemService


def run(
    environ: Mapping[str, str] | None = None,
    migrations_dir: str | os.PathLike[str] = DEFAULT_MIGRATIONS_DIR,
) -> None:
    """Start the application and serve until interrupted."""
    print("Starting the application...")

    try:
        db = Database.from_environment(environ)
    except Exception as err:
        print("database.NewDatabase() error: ", err)
        raise

    with db:
        try:
            db.migrate(migrations_dir)
        except Exception as err:
            print("database.Migrate() error: ", err)
            raise

        handler = Handler(CommodityService(db), SolarSystemService(db))
        handler.serve()


def main(argv: Sequence[str] | None = None) -> None:
    """Command-line entry point; errors are printed rather than raised."""
    parser = argparse.ArgumentParser(
        description="Serve the commodity and solar system API on port 8080."
    )
    parser.parse_args(argv)
    try:
        run()
    except Exception as err:
        print(err)