# pilipili

Building blocks for an Emby bot:

- `pilipili.config`: configuration read from a TOML file, created from a
  template on first load.
- `pilipili.logger`: logging set up through an immutable, fluent
  `LoggerBuilder` (level, console or rolling file output, format, display
  options).
- `pilipili.network`: a `Provider` that turns a `TargetType` description
  (base URL, path, method, task, headers) into an `httpx` request, with
  plugins such as `CurlPlugin` that log each request as a `curl` command.
- `pilipili.emby_api`: Emby endpoints (`GetUser`) built on that provider.
- `pilipili.database`: SQLite helpers built on `aiosqlite`: connection
  settings, value conversion, an adapter and connection manager, schema
  helpers and migrations, transactions, error-swallowing query helpers and a
  generic `Repository` with create / fetch / update / delete.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running

```
pilipili
```

The command takes no options besides `--help`. It installs a file logger at
info level (daily files under `./logs`), then exits with status 0.

## Configuration

`load_config()` makes sure a `config/` directory exists and, if
`config/config.toml` is missing, copies it from `config.template` in the
current directory. All three paths can be passed as arguments. The file looks
like this:

```toml
[emby]
base_url = "http://127.0.0.1:8096"
api_key = "placeholder"
```

Both keys are required strings; unknown keys are ignored. `get_config()`
loads the file once and returns the same `Config` afterwards:

```python
from pilipili.config import get_config

config = get_config()
print(config.emby.base_url)
```

A missing template, an unreadable file, malformed TOML or a missing or
mistyped field raises `ConfigError`. `parse_config(text)` parses a TOML string
directly, `Config.from_dict(data)` builds a configuration from a mapping, and
`set_config(config)` replaces the shared configuration (`set_config(None)`
makes the next `get_config()` reload the file).

## Logging

```python
from pilipili.logger import LoggerBuilder, LogLevel, LogRotation, LogWriter

guard = (
    LoggerBuilder()
    .with_level(LogLevel.DEBUG)
    .with_writer(LogWriter.FILE)
    .with_rolling(LogRotation.DAILY)
    .with_directory("./logs")
    .init()
)
...
guard.close()
```

`init()` installs one handler on the root logger, replacing a handler it
installed earlier, and returns a `LoggerGuard`; closing the guard (or leaving
it as a context manager) flushes and removes the handler and restores the
previous root level.

- Levels: `LogLevel.OFF`, `ERROR`, `WARN`, `INFO`, `DEBUG`, `TRACE`. A level
  name in the `PILIPILI_LOG` environment variable overrides the configured
  level.
- Writers: `LogWriter.FILE` or `LogWriter.CONSOLE` (standard output, with
  coloured level names).
- Rotation: `LogRotation.MINUTELY`, `HOURLY`, `DAILY` name files after the
  current UTC period, prefixed with `file_prefix` when it is set;
  `LogRotation.NEVER` writes to a single file named by `file_prefix`, which is
  then required.
- Formats: `LogFormat.COMPACT` (default), `FULL`, `PRETTY` and `JSON`.
- `LogDisplayOptions` chooses whether the level, target (logger name),
  thread ids, thread names and source location are shown.

## HTTP requests

Describe an endpoint as a `TargetType`, then send it through a `Provider`:

```python
import asyncio

from pilipili.emby_api import GetUser
from pilipili.network import CurlPlugin, Provider


async def fetch_user() -> None:
    async with Provider([CurlPlugin()]) as provider:
        response = await provider.send_request(GetUser(user_id="example-user-id"))
        print(response.status_code, response.text)


asyncio.run(fetch_user())
```

A target's `task()` returns `RequestPlain`, `RequestJson` (a JSON body) or
`RequestParameters` (query parameters). `build_url(target)` joins the base URL
and path with exactly one slash, and `Provider.build_request(target)` builds
the request without sending it. Plugins receive every request before it is
sent, and then either the response or the error; transport errors are raised
again after the plugins have seen them. A `Provider` may be given its own
`httpx.AsyncClient`, which `aclose()` then leaves open.

`GetUser` reads the Emby base URL and API key from `get_config()` and sends
`GET emby/Users/<user_id>` with the key as the `api_key` query parameter.

## Database

```python
from pilipili.database.config import SqliteConfig

SqliteConfig(db_path="data.db").get_db_url()  # "sqlite://data.db"
```

- `pilipili.database.bindable`: `to_sql_value` turns booleans into 0 or 1,
  clamps integers above the signed 64-bit range to its maximum, writes dates
  as `YYYY-MM-DD` and rejects other types; `bind_values` converts
  `(column, value)` pairs into positional parameters.
- `pilipili.database.adapter`: `SqliteAdapter` runs raw SQL in autocommit
  mode (`execute` returns the affected row count, `fetch_all` returns rows as
  dicts); `DatabaseConnectionManager` builds one from a `SqliteConfig`.
- `pilipili.database.migration`: `get_table_schema`, `ensure_database`
  (creates missing tables with `id` and `name` columns) and `run_migrations`
  (runs every `.sql` file in a directory, in name order).
- `pilipili.database.transaction`: `TransactionManager.begin(db)` with
  `commit()` and `rollback()`; as an async context manager it commits on
  success and rolls back on error.
- `pilipili.database.queries`: `execute_query`, `execute_query_as` and
  `execute_insert` log failures and return an empty list or `False` instead
  of raising.

Define an `Entity` and a `Repository` gives you the CRUD operations:

```python
import asyncio
from typing import Any, Mapping

import aiosqlite

from pilipili.database.repository import Entity, Repository


class User(Entity):
    def __init__(self, user_id: str, name: str, deleted: bool = False):
        self.user_id, self.name, self.deleted = user_id, name, deleted

    @classmethod
    def table_name(cls) -> str:
        return "users"

    def to_values(self) -> list[tuple[str, Any]]:
        return [("id", self.user_id), ("name", self.name), ("deleted", self.deleted)]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        return cls(row["id"], row["name"], bool(row["deleted"]))

    def id(self) -> str:
        return self.user_id


async def demo() -> None:
    async with aiosqlite.connect(":memory:", isolation_level=None) as db:
        await db.execute(
            "CREATE TABLE users (id TEXT PRIMARY KEY, name TEXT, deleted INTEGER DEFAULT 0)"
        )
        users = Repository(db, User)
        await users.create(User("1", "Alice"))
        await users.update(User("1", "Alice Updated"))
        print((await users.fetch("1")).name)  # Alice Updated
        await users.delete("1", logical=True)  # sets deleted = 1
        await users.delete("1", logical=False)  # removes the row


asyncio.run(demo())
```

The repository never commits: open the connection in autocommit mode, as
above, or wrap the calls in a `TransactionManager`.

## What this package does not do

- The `pilipili` command does no bot work: it only sets up logging and exits.
- Only SQLite is supported. `PostgresConfig` builds a `postgresql://` URL, but
  `DatabaseConnectionManager` rejects it with `ValueError`.
- The only Emby endpoint provided is `GetUser`.