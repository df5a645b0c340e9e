"""
Ordered Store Adapter - sorted key-value access over SQLAlchemy.

Keys are composite tuples ``(namespace, timestamp, name)``. The adapter
exposes exactly three primitives:

- put(key, value)        : insert or overwrite one key
- scan_prefix(prefix)    : lazy, ascending iteration over a key prefix
- delete(key)            : remove one key (delete_many for a batch)

There are no cross-call transactions: each put, each delete batch and each
scan runs in its own session. Any database failure surfaces as
StorageError and is never retried here.
"""
from typing import Any, Dict, Iterable, Iterator, Sequence, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from src.core.exceptions import StorageError
from src.core.logging_config import get_logger
from src.database.connection import StoreConnection
from src.database.models import KVEntry

logger = get_logger(__name__)

StoreKey = Tuple[str, int, str]
StoreValue = Dict[str, Any]

# Column order defines key order
KEY_COLUMNS = (KVEntry.namespace, KVEntry.ts, KVEntry.name)


class OrderedStore:
    """
    Sorted key-value store over a single table.

    Example:
        >>> store = OrderedStore(connection)
        >>> store.put(("responses", 1700000000000, "alice"), {"name": "alice"})
        >>> for key, value in store.scan_prefix(("responses",)):
        ...     print(key)
        ('responses', 1700000000000, 'alice')
    """

    def __init__(self, connection: StoreConnection, scan_batch_size: int = 100):
        """
        Args:
            connection: Opened store connection
            scan_batch_size: Rows fetched per round trip during a scan
        """
        self.connection = connection
        self.scan_batch_size = scan_batch_size

    def put(self, key: StoreKey, value: StoreValue) -> None:
        """Write value at key, replacing whatever is stored there."""
        namespace, ts, name = _check_key(key)
        try:
            with self.connection.get_session() as session:
                session.merge(KVEntry(namespace=namespace, ts=ts, name=name, value=value))
        except SQLAlchemyError as e:
            logger.error(f"put failed for key={key}: {e}")
            raise StorageError(str(e)) from e
        logger.debug(f"put key={key}")

    def scan_prefix(self, prefix: Sequence[Any]) -> Iterator[Tuple[StoreKey, StoreValue]]:
        """
        Iterate (key, value) pairs whose leading key parts equal prefix.

        Results come in ascending key order and are fetched lazily in
        batches, so a consumer that stops early leaves the rest unread.

        Args:
            prefix: One to three leading key components

        Yields:
            (key, value) tuples

        Raises:
            ValueError: If the prefix is empty or longer than a key
            StorageError: If the scan fails
        """
        if not 1 <= len(prefix) <= len(KEY_COLUMNS):
            raise ValueError(f"prefix must have 1 to {len(KEY_COLUMNS)} parts, got {len(prefix)}")

        stmt = (
            select(KVEntry)
            .where(*[column == part for column, part in zip(KEY_COLUMNS, prefix)])
            .order_by(*KEY_COLUMNS)
            .execution_options(yield_per=self.scan_batch_size)
        )

        try:
            with self.connection.get_session() as session:
                for entry in session.scalars(stmt):
                    yield entry.key, entry.value
        except SQLAlchemyError as e:
            logger.error(f"scan failed for prefix={tuple(prefix)}: {e}")
            raise StorageError(str(e)) from e

    def delete(self, key: StoreKey) -> None:
        """Remove a single key. Deleting a missing key is a no-op."""
        self.delete_many([key])

    def delete_many(self, keys: Iterable[StoreKey]) -> None:
        """
        Remove a batch of keys in one transaction.

        Raises:
            StorageError: If the batch fails; none of its deletes are kept
        """
        keys = [_check_key(key) for key in keys]
        if not keys:
            return
        try:
            with self.connection.get_session() as session:
                for namespace, ts, name in keys:
                    session.execute(
                        delete(KVEntry).where(
                            KVEntry.namespace == namespace,
                            KVEntry.ts == ts,
                            KVEntry.name == name,
                        )
                    )
        except SQLAlchemyError as e:
            logger.error(f"delete of {len(keys)} key(s) failed: {e}")
            raise StorageError(str(e)) from e
        logger.debug(f"deleted {len(keys)} key(s)")


def _check_key(key: Sequence[Any]) -> StoreKey:
    """Validate and normalise a full key."""
    if len(key) != len(KEY_COLUMNS):
        raise ValueError(f"key must have {len(KEY_COLUMNS)} parts, got {len(key)}")
    namespace, ts, name = key
    return (str(namespace), int(ts), str(name))
