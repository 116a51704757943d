#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import contextlib
import copy
from typing import Any, Iterator, cast

import polars as pl
from polars.exceptions import NoDataError

from roombook.simulation.database_schemas import DATABASE_SCHEMAS, DatabaseNamespace


class ExecutionContext:
    """In-memory stand-in for the booking service.

    Holds one table per `DatabaseNamespace` with the records the service
    would return: employees, offices, meeting rooms and canonical events.
    Generated event instances are never stored.

    All databases contain a null row as "headguard" so that they keep their
    schema when every record is removed.
    """

    dbs_schemas: dict[DatabaseNamespace, dict[str, Any]] = DATABASE_SCHEMAS

    def __init__(self):
        self._dbs: dict[str, pl.DataFrame] = {
            namespace: pl.DataFrame(
                {k: None for k in self.dbs_schemas[namespace]},
                schema=self.dbs_schemas[namespace],
            )
            for namespace in self.dbs_schemas
        }

    @staticmethod
    def headguard_predicate(column_names: set[str]) -> pl.Expr:
        """A polars expression matching headguard rows, where all columns are None.

        Args:
            column_names:   Column names in the dataframe
        Returns:
            A polars expression matching headguard rows
        """
        return pl.all_horizontal(
            [pl.col(column_name).is_null() for column_name in column_names]
        )

    @classmethod
    def drop_headguard(cls, dataframe: pl.DataFrame) -> pl.DataFrame:
        """Drops the all None headguard row

        Args:
            dataframe:  Dataframe to drop headguard row from.

        Returns:
            Dataframe with headguard dropped.
        """
        return dataframe.filter(
            ~cls.headguard_predicate(column_names=set(dataframe.columns))
        )

    def get_database(
        self,
        namespace: DatabaseNamespace,
        drop_headguard: bool = True,
    ) -> pl.DataFrame:
        """Get a database given the namespace

        Note that the database returned is a subview of the original database.
        Please treat it as an immutable object to avoid unintended effect.
        Use add / remove functions to modify database if needed.

        Parameters
        ----------
        namespace:
            Database namespace
        drop_headguard
            Drop the null headguard entry. Should only be turned off for debugging purposes

        Returns
        -------
            Requested database
        """
        dataframe = self._dbs[namespace]
        if drop_headguard:
            dataframe = self.drop_headguard(dataframe)
        return dataframe

    def add_to_database(
        self,
        namespace: DatabaseNamespace,
        rows: list[dict[str, Any]],
    ) -> None:
        """Add multiple rows to a database.

        Parameters
        ----------
        namespace
            Database namespace
        rows
            List of rows to be added, each item should be a Dict of column and value

        Raises
        ------
        KeyError:   When provided column names in rows does not match given schema
        ValueError: When entry is all None. All None is reserved for headguard
        """
        rows_column_names = {x for row in rows for x in row.keys()}
        schema_column_names = set(self.dbs_schemas[namespace].keys())
        if rows_column_names - schema_column_names:
            raise KeyError(
                f"Only column names {schema_column_names} are allowed for namespace {namespace}. "
                f"Found unknown column name {rows_column_names - schema_column_names}"
            )
        for row in rows:
            if all(row.get(column_name) is None for column_name in schema_column_names):
                raise ValueError(
                    "Cannot add row with all None values. "
                    "All None values are reserved for headguard"
                )
        rows = copy.deepcopy(rows)
        self._dbs[namespace] = self._dbs[namespace].vstack(
            pl.DataFrame(rows, schema=self.dbs_schemas[namespace])
        )

    def remove_from_database(
        self,
        namespace: DatabaseNamespace,
        predicate: pl.Expr,
    ) -> None:
        """Remove multiple rows from a database.

        Parameters
        ----------
        namespace
            Database namespace
        predicate
            A polars predicate that evaluates to boolean, used to identify the rows to remove

        Raises
        ------
        NoDataError: If no matching rows where found
        """
        if self.get_database(namespace).filter(predicate).is_empty():
            raise NoDataError(f"No db entry matching {predicate=} found")
        # Remove entries that match predicate, except for headguard
        self._dbs[namespace] = self._dbs[namespace].filter(
            ~predicate.fill_null(False)
            | self.headguard_predicate(column_names=set(self._dbs[namespace].columns))
        )


def _create_global_execution_context() -> ExecutionContext:
    """Set up the global execution context, lazily on first access."""
    execution_context = ExecutionContext()
    globals()["_global_execution_context"] = execution_context
    return execution_context


def get_current_context() -> ExecutionContext:
    """Getter for global execution context variable

    Returns
        global execution context object

    """
    # explicitly check if the global variable exists so that tests running in
    # separate pytest-xdist processes each get their own context
    global_execution_context = globals().get("_global_execution_context")
    if global_execution_context is None:
        return _create_global_execution_context()

    return cast(ExecutionContext, global_execution_context)


def set_current_context(execution_context: ExecutionContext) -> None:
    """Setter for global execution context variable

    Args:
        execution_context: new context to be applied as global execution context

    Returns:

    """
    globals()["_global_execution_context"] = execution_context


@contextlib.contextmanager
def new_context(context: ExecutionContext) -> Iterator[ExecutionContext]:
    """Handy context manager which patches _global_execution_context with context,
    and reverts after context exit

    Parameters
    ----------
    context
        Context to apply

    Returns
    -------

    """
    original_context = get_current_context()
    try:
        set_current_context(context)
        yield context
    # Release resource even when exceptions are raised
    finally:
        # Reset original context
        set_current_context(original_context)
