# spacesim

A small HTTP service that stores the building blocks of a space
simulation: tradeable **commodities** and **solar systems**. It exposes a
JSON API for listing, fetching, creating and deleting both kinds of record,
backed by an SQLite database whose schema is brought up to date by
migration scripts when the service starts.

## Running the service

```
spacesim
```

The command takes no options besides `--help`. On start-up it:

1. opens the SQLite database file named by the `DB_NAME` environment
   variable (if `DB_NAME` is empty or unset, a private in-memory database is
   used, which is lost when the process exits);
2. applies pending migrations from the directory `/migrations`;
3. listens for HTTP requests on port 8080 on all interfaces.

Press Ctrl-C to stop it. Errors during start-up are printed and the command
exits.

### Migrations

`Database.migrate` applies every file in the migrations directory named
`<version>_<title>.up.sql` whose version is newer than the one recorded in
the database, in ascending version order, and returns the versions it
applied. The current version is kept in a `schema_migrations` table. A
migration that fails leaves the version marked dirty, and later runs refuse
to continue until that is fixed by hand. Two files with the same version
are an error.

## API

All routes live under `/api/v1`.

| Method   | Path                        | Result                                   |
|----------|-----------------------------|------------------------------------------|
| `GET`    | `/api/v1/commodities`       | a page of commodities                    |
| `GET`    | `/api/v1/commodities/{id}`  | one commodity, or 404                    |
| `POST`   | `/api/v1/commodities`       | creates a commodity and returns it       |
| `DELETE` | `/api/v1/commodities/{id}`  | removes a commodity, 204 on success      |
| `GET`    | `/api/v1/solarSystems`      | a page of solar systems                  |
| `GET`    | `/api/v1/solarSystems/{id}` | one solar system, or 404                 |
| `POST`   | `/api/v1/solarSystems`      | creates a solar system and returns it    |
| `DELETE` | `/api/v1/solarSystems/{id}` | removes a solar system, 204 on success   |

A new commodity is posted as:

```json
{"Name": "Iron Ore", "UnitMass": 2.5, "UnitVolume": 1.0}
```

and a new solar system as:

```json
{"Name": "Sol"}
```

Keys are matched case-insensitively, unknown keys are ignored and missing
fields default to an empty string or `0`. A body that is not JSON, or a
field of the wrong type, gives 400. The service assigns a fresh random UUID
to every record it creates; any `ID` in the request body is replaced.
Deleting an id that does not exist still answers 204. Storage failures
answer 500 with an empty body.

### Pagination

List endpoints accept these query parameters:

- `page` — page number, starting at 1 (default 1; a value that is not an
  integer counts as 0)
- `per_page` — records per page (default 10, at most 100)
- `order_by` — `field` or `field,desc`. Commodities may be ordered by
  `name`, `unitmass` or `unitvolume`; solar systems by `name`. The field is
  matched case-insensitively; any other field falls back to ordering by the
  `createdat` column. The direction is ascending unless `desc` follows the
  comma.

Each list response carries the records together with the pagination that
was read from the query, for example:

```json
{
  "commodities": [{"ID": "...", "Name": "Iron Ore", "UnitMass": 2.5, "UnitVolume": 1.0}],
  "pagination": {"Page": 1, "PerPage": 10, "OrderBy": "name"}
}
```

## Using it as a library

The modules can be wired together directly:

- `spacesim.pagination` — `Pagination` and `get_pagination(query)`
- `spacesim.commodity` — `Commodity`, `CommodityService`,
  `CommodityError`, `CommodityNotFoundError`
- `spacesim.solar_system` — `SolarSystem`, `SolarSystemService`,
  `SolarSystemError`, `SolarSystemNotFoundError`
- `spacesim.database` — `Database` (the store behind both services) and
  `DatabaseError`
- `spacesim.api` — `Handler`, whose `app` attribute is the Flask
  application and whose `serve(host, port)` runs it until interrupted
- `spacesim.server` — `run(environ, migrations_dir)` and `main(argv)`

```python
import sqlite3

from spacesim.api import Handler
from spacesim.commodity import CommodityService
from spacesim.database import Database
from spacesim.solar_system import SolarSystemService

db = Database(sqlite3.connect("spacesim.db", check_same_thread=False))
db.migrate("migrations")

handler = Handler(CommodityService(db), SolarSystemService(db))
handler.serve("127.0.0.1", 8080)
```

`Database.from_environment(environ)` opens the database the same way the
command does. `Database` is a context manager that closes its connection on
exit. Services raise `CommodityNotFoundError` or `SolarSystemNotFoundError`
when a record does not exist; the HTTP layer turns these into 404
responses.

## What it does not do

- No migration scripts are included. You must supply them; they need to
  create a `commodities` table with columns `id`, `name`, `unitmass`,
  `unitvolume` and `createdat`, and a `solar_systems` table with `id`,
  `name` and `createdat`.
- Only SQLite is supported. `from_environment` reads `DB_NAME` alone; there
  is no network database, user, password, host or SSL setting.
- The command's port (8080) and migrations directory (`/migrations`) are
  fixed; use `run` or `Handler.serve` from Python to choose others.
- There is no authentication and no way to update an existing record.