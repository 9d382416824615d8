from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from sqlalchemy import JSON, bindparam, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeEngine

from storefront.core.exceptions import ConflictError, DatabaseError
import logging

logger = logging.getLogger(__name__)


class BaseRepository:
    """
    Base repository providing common database operations.

    Repositories never open transactions on their own behalf: every data
    method takes the Connection of a transaction the calling service owns,
    so several repositories can take part in one all-or-nothing unit.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """
        Open a transaction that commits on success and rolls back on any
        exception raised inside the block.
        """
        try:
            with self.engine.begin() as conn:
                yield conn
        except IntegrityError as e:
            logger.warning(f"Integrity constraint violation: {e.orig}")
            raise ConflictError("Request conflicts with the current state of the resource")
        except SQLAlchemyError as e:
            logger.error(f"Transaction failed: {str(e)}")
            raise DatabaseError(f"Transaction failed: {str(e)}", "TRANSACTION")

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Read-only connection; nothing is committed."""
        try:
            with self.engine.connect() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error(f"Database connection error: {str(e)}")
            raise DatabaseError(f"Database connection failed: {str(e)}", "SELECT")

    @staticmethod
    def _statement(
        query: str,
        json_params: Iterable[str] = (),
        types: Optional[Mapping[str, TypeEngine]] = None
    ) -> TextClause:
        """Wrap raw SQL, typing JSON binds and any result columns that need conversion."""
        stmt = text(query)
        json_params = tuple(json_params)
        if json_params:
            stmt = stmt.bindparams(*(bindparam(name, type_=JSON) for name in json_params))
        if types:
            stmt = stmt.columns(**types)
        return stmt

    def fetch_all(
        self,
        conn: Connection,
        query: str,
        params: Optional[Dict[str, Any]] = None,
        types: Optional[Mapping[str, TypeEngine]] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute SELECT query and return results as list of dictionaries

        Args:
            conn: Connection of the caller's transaction
            query: SQL query string
            params: Query parameters
        """
        result = conn.execute(self._statement(query, types=types), params or {})
        return [dict(row) for row in result.mappings()]

    def fetch_one(
        self,
        conn: Connection,
        query: str,
        params: Optional[Dict[str, Any]] = None,
        types: Optional[Mapping[str, TypeEngine]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Execute query expecting single result

        Returns:
            Single row dictionary or None if not found
        """
        row = conn.execute(self._statement(query, types=types), params or {}).mappings().first()
        return dict(row) if row else None

    def scalar(
        self,
        conn: Connection,
        query: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Execute query returning single scalar value (COUNT, SUM, etc.)"""
        return conn.execute(text(query), params or {}).scalar()

    def execute(
        self,
        conn: Connection,
        command: str,
        params: Optional[Dict[str, Any]] = None,
        json_params: Iterable[str] = ()
    ) -> int:
        """
        Execute INSERT/UPDATE/DELETE command

        Returns:
            Number of affected rows
        """
        return conn.execute(self._statement(command, json_params), params or {}).rowcount

    def insert_returning_id(
        self,
        conn: Connection,
        command: str,
        params: Optional[Dict[str, Any]] = None,
        json_params: Iterable[str] = ()
    ) -> int:
        """Execute INSERT command and return the generated ID"""
        stmt = self._statement(command + " RETURNING id", json_params)
        return int(conn.execute(stmt, params or {}).scalar_one())

    def exists(self, conn: Connection, entity_id: int) -> bool:
        """Check if entity exists by ID"""
        query = f"SELECT 1 FROM {self.table_name} WHERE id = :id"
        return self.scalar(conn, query, {"id": entity_id}) is not None

    @property
    def table_name(self) -> str:
        """Table name for the entity"""
        raise NotImplementedError
