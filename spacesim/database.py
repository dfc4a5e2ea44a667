"""SQL storage for commodities and solar systems, with schema migrations."""

from __future__ import annotations

import os
import re
import sqlite3
import threading
import uuid
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any

from .commodity import Commodity, CommodityNotFoundError
from .pagination import Pagination
from .solar_system import SolarSystem, SolarSystemNotFoundError

DEFAULT_MIGRATIONS_DIR = "/migrations"

_MIGRATION_FILE = re.compile(r"^(\d+)_(.*)\.up\.sql$")

_COMMODITY_ORDER_FIELDS = ("unitmass", "unitvolume", "name")
_SOLAR_SYSTEM_ORDER_FIELDS = ("name",)
_DEFAULT_ORDER_FIELD = "createdat"


class DatabaseError(Exception):
    """Raised when the database cannot be reached or a statement fails."""


def _commodity_from_row(row: tuple[Any, ...]) -> Commodity:
    commodity_id, name, unit_mass, unit_volume = row
    return Commodity(
        id=commodity_id,
        name=name if name is not None else "",
        unit_mass=float(unit_mass) if unit_mass is not None else 0.0,
        unit_volume=float(unit_volume) if unit_volume is not None else 0.0,
    )


def _solar_system_from_row(row: tuple[Any, ...]) -> SolarSystem:
    solar_system_id, name = row
    return SolarSystem(id=solar_system_id, name=name if name is not None else "")


class Database:
    """A store for commodities and solar systems over one SQL connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection
        self._lock = threading.RLock()

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> Database:
        """Open the database named by ``DB_NAME`` in the environment.

        An empty or missing ``DB_NAME`` opens a private in-memory database.
        """
        env = os.environ if environ is None else environ
        name = env.get("DB_NAME", "") or ":memory:"
        try:
            connection = sqlite3.connect(name, check_same_thread=False)
        except sqlite3.Error as err:
            print(err)
            raise DatabaseError("failed to create pool") from err
        return cls(connection)

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def ping(self) -> None:
        """Check that the database answers."""
        try:
            with self._lock:
                self.connection.execute("SELECT 1").fetchone()
        except sqlite3.Error as err:
            raise DatabaseError(f"failed to connect to database: {err}") from err

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self.connection.close()

    # -- migrations -------------------------------------------------------

    def _pending_migrations(self, directory: Path, current: int) -> list[tuple[int, Path]]:
        if not directory.is_dir():
            raise DatabaseError(f"migrations directory not found: {directory}")
        found: dict[int, Path] = {}
        for path in directory.iterdir():
            match = _MIGRATION_FILE.match(path.name)
            if match is None:
                continue
            version = int(match.group(1))
            if version in found:
                raise DatabaseError(f"duplicate migration file: {path.name}")
            found[version] = path
        return sorted((v, p) for v, p in found.items() if v > current)

    def migrate(self, migrations_dir: str | os.PathLike[str] = DEFAULT_MIGRATIONS_DIR) -> list[int]:
        """Apply every ``<version>_<title>.up.sql`` newer than the schema.

        Returns the versions applied, in order.
        """
        print("Migrating database...")
        directory = Path(migrations_dir)
        applied: list[int] = []
        with self._lock:
            try:
                self.connection.execute(
                    "CREATE TABLE IF NOT EXISTS schema_migrations "
                    "(version INTEGER NOT NULL PRIMARY KEY, dirty INTEGER NOT NULL)"
                )
                self.connection.commit()
                row = self.connection.execute(
                    "SELECT version, dirty FROM schema_migrations LIMIT 1"
                ).fetchone()
            except sqlite3.Error as err:
                raise DatabaseError(f"could not create the migrations table: {err}") from err

            current = -1
            if row is not None:
                current, dirty = int(row[0]), bool(row[1])
                if dirty:
                    raise DatabaseError(
                        f"could not run up migrations: dirty database version {current}"
                    )

            pending = self._pending_migrations(directory, current)
            if not pending:
                print("No new migrations to run")

            for version, path in pending:
                try:
                    self._set_version(version, dirty=True)
                    self.connection.executescript(path.read_text(encoding="utf-8"))
                    self._set_version(version, dirty=False)
                except (sqlite3.Error, OSError) as err:
                    raise DatabaseError(f"could not run up migrations: {err}") from err
                applied.append(version)

        print("Database migrated successfully")
        return applied

    def _set_version(self, version: int, *, dirty: bool) -> None:
        self.connection.execute("DELETE FROM schema_migrations")
        self.connection.execute(
            "INSERT INTO schema_migrations (version, dirty) VALUES (?, ?)",
            (version, int(dirty)),
        )
        self.connection.commit()

    # -- shared helpers ---------------------------------------------------

    def _page(
        self, table: str, columns: str, pagination: Pagination, allowed: tuple[str, ...]
    ) -> list[tuple[Any, ...]]:
        order_by = pagination.order_by_field(allowed, _DEFAULT_ORDER_FIELD)
        direction = pagination.order_by_direction()
        with self._lock:
            return self.connection.execute(
                f"SELECT {columns} FROM {table} "
                f"ORDER BY {order_by} {direction} LIMIT ? OFFSET ?",
                (pagination.limit(), pagination.offset()),
            ).fetchall()

    def _write(self, statement: str, params: tuple[Any, ...]) -> None:
        with self._lock:
            try:
                self.connection.execute(statement, params)
                self.connection.commit()
            except sqlite3.Error:
                self.connection.rollback()
                raise

    # -- commodities ------------------------------------------------------

    def get_commodity_by_id(self, commodity_id: str) -> Commodity:
        """Return the commodity with this id or raise CommodityNotFoundError."""
        try:
            with self._lock:
                row = self.connection.execute(
                    "SELECT id, name, unitmass, unitvolume FROM commodities WHERE id = ?",
                    (commodity_id,),
                ).fetchone()
        except sqlite3.Error as err:
            raise CommodityNotFoundError() from err
        if row is None:
            raise CommodityNotFoundError()
        return _commodity_from_row(row)

    def get_commodities_by_pagination(self, pagination: Pagination) -> list[Commodity]:
        """Return one page of commodities in the requested order."""
        try:
            rows = self._page(
                "commodities", "id, name, unitmass, unitvolume", pagination,
                _COMMODITY_ORDER_FIELDS,
            )
        except sqlite3.Error as err:
            raise DatabaseError(f"error getting commodities by pagination: {err}") from err
        return [_commodity_from_row(row) for row in rows]

    def create_commodity(self, commodity: Commodity) -> Commodity:
        """Insert the commodity under a fresh random id and return it."""
        created = replace(commodity, id=str(uuid.uuid4()))
        try:
            self._write(
                "INSERT INTO commodities (id, name, unitmass, unitvolume) VALUES (?, ?, ?, ?)",
                (created.id, created.name, created.unit_mass, created.unit_volume),
            )
        except sqlite3.Error as err:
            raise DatabaseError(f"error creating commodity: {err}") from err
        return created

    def remove_commodity(self, commodity_id: str) -> None:
        """Delete the commodity with this id; a missing id is not an error."""
        try:
            self._write("DELETE FROM commodities WHERE id = ?", (commodity_id,))
        except sqlite3.Error as err:
            raise DatabaseError(f"error deleting commodity: {err}") from err

    # -- solar systems ----------------------------------------------------

    def get_solar_system_by_id(self, solar_system_id: str) -> SolarSystem:
        """Return the solar system with this id or raise SolarSystemNotFoundError."""
        try:
            with self._lock:
                row = self.connection.execute(
                    "SELECT id, name FROM solar_systems WHERE id = ?",
                    (solar_system_id,),
                ).fetchone()
        except sqlite3.Error as err:
            raise SolarSystemNotFoundError() from err
        if row is None:
            raise SolarSystemNotFoundError()
        return _solar_system_from_row(row)

    def get_solar_systems_by_pagination(self, pagination: Pagination) -> list[SolarSystem]:
        """Return one page of solar systems in the requested order."""
        try:
            rows = self._page("solar_systems", "id, name", pagination, _SOLAR_SYSTEM_ORDER_FIELDS)
        except sqlite3.Error as err:
            raise DatabaseError(f"error getting solar systems by pagination: {err}") from err
        return [_solar_system_from_row(row) for row in rows]

    def create_solar_system(self, solar_system: SolarSystem) -> SolarSystem:
        """Insert the solar system under a fresh random id and return it."""
        created = replace(solar_system, id=str(uuid.uuid4()))
        try:
            self._write(
                "INSERT INTO solar_systems (id, name) VALUES (?, ?)",
                (created.id, created.name),
            )
        except sqlite3.Error as err:
            raise DatabaseError(f"error creating solar system: {err}") from err
        return created

    def remove_solar_system(self, solar_system_id: str) -> None:
        """Delete the solar system with this id; a missing id is not an error."""
        try:
            self._write("DELETE FROM solar_systems WHERE id = ?", (solar_system_id,))
        except sqlite3.Error as err:
            raise DatabaseError(f"error deleting solar system: {err}") from err