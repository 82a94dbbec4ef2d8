"""Schema creation and reconciliation run at startup."""

from loguru import logger
from sqlalchemy import Connection, Engine, Table, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateColumn
from sqlmodel import SQLModel

import bookshelf.entities  # noqa: F401  registers every table with the metadata
from bookshelf.core.errors import FatalStartupError


class DbManageService:
    """Brings the live schema in line with the declared tables.

    ``ensure_schema`` is idempotent: missing tables, columns and indexes
    are created, and indexes and columns that are no longer declared are
    dropped. Tables the application does not declare are left alone.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._metadata = SQLModel.metadata

    def ensure_schema(self) -> None:
        try:
            self._metadata.create_all(self._engine)
            with self._engine.begin() as connection:
                changes = sum(
                    self._reconcile_table(connection, table)
                    for table in self._metadata.sorted_tables
                )
        except SQLAlchemyError as e:
            raise FatalStartupError(f"Schema migration failed: {e}") from e

        if changes:
            logger.info("Schema reconciled with {} change(s)", changes)
        else:
            logger.info("Schema up to date")

    def _reconcile_table(self, connection: Connection, table: Table) -> int:
        inspector = inspect(connection)
        preparer = connection.dialect.identifier_preparer
        table_name = preparer.format_table(table)
        changes = 0

        declared_columns = {column.name for column in table.columns}
        live_columns = {column["name"] for column in inspector.get_columns(table.name)}

        declared_indexes = {index.name for index in table.indexes}
        live_indexes = {
            index["name"]
            for index in inspector.get_indexes(table.name)
            if index["name"] and not index.get("duplicates_constraint")
        }

        # Indexes first: SQLite refuses to drop an indexed column
        for name in sorted(live_indexes - declared_indexes):
            logger.info("Dropping index {} on {}", name, table.name)
            connection.exec_driver_sql(f"DROP INDEX {preparer.quote(name)}")
            changes += 1

        for name in sorted(live_columns - declared_columns):
            logger.info("Dropping column {}.{}", table.name, name)
            connection.exec_driver_sql(
                f"ALTER TABLE {table_name} DROP COLUMN {preparer.quote(name)}"
            )
            changes += 1

        for column in table.columns:
            if column.name in live_columns:
                continue
            logger.info("Adding column {}.{}", table.name, column.name)
            column_ddl = CreateColumn(column).compile(dialect=connection.dialect)
            connection.exec_driver_sql(
                f"ALTER TABLE {table_name} ADD COLUMN {column_ddl}"
            )
            changes += 1

        for index in table.indexes:
            if index.name in live_indexes:
                continue
            logger.info("Creating index {} on {}", index.name, table.name)
            index.create(connection, checkfirst=True)
            changes += 1

        return changes
