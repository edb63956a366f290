from typing import Any, AsyncContextManager, Dict, List, Optional, Protocol, Sequence, Tuple


class DBSession(Protocol):
    """One exclusively-owned connection inside an open read-only transaction."""

    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> None:
        """Run a statement that produces no rows (e.g. SET LOCAL)."""

    async def fetch(
        self, sql: str, params: Optional[Sequence[Any]] = None
    ) -> Tuple[List[Dict[str, Any]], List[str]]:
        """Run a query with native $n placeholders and return (rows, columns)."""


class DBAdapter(Protocol):
    """Pooled, read-only database adapter."""

    name: str
    dialect: str

    def read_only_transaction(self) -> AsyncContextManager[DBSession]:
        """
        Acquire a pooled connection and open a read-only transaction.

        Commits when the block exits normally, rolls back on any exception,
        and always returns the connection to the pool.
        """

    async def ping(self) -> None:
        """Raise if the store cannot answer a trivial query."""
