"""
Survey Repository - domain layer over the ordered store.

All survey records live under the ``responses`` namespace keyed by
``(namespace, timestamp, name)``, so a plain prefix scan yields them
oldest first. That ordering is what list(), its ``since`` filter and its
early stop rely on; there is no secondary index.

Operations:
1. write          : validate answers, stamp a timestamp, put one record
2. list           : filtered, paginated ascending scan with early stop
3. stats          : full scan, exact counts and time range
4. delete_by_name : full scan, batched best-effort deletes

None of these are transactional across calls. A write that lands while a
stats or delete scan is running may or may not be seen by it.
"""
import time
from typing import Any, Callable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from src.core.exceptions import StorageError, ValidationError
from src.core.logging_config import get_logger
from src.database.store import OrderedStore, StoreKey
from src.models.survey import (
    RESPONSES_NAMESPACE,
    ListFilter,
    SurveyAnswers,
    SurveyEntry,
    SurveyPage,
    SurveyRecord,
    SurveyStats,
)

logger = get_logger(__name__)

INVALID_RESPONSE_FORMAT = "Invalid response format"


def current_millis() -> int:
    """Wall-clock time in integer milliseconds."""
    return int(time.time() * 1000)


class SurveyRepository:
    """
    Stores and queries onboarding survey responses.

    Example:
        >>> repo = SurveyRepository(OrderedStore(connection))
        >>> repo.write("alice", {"teachLLMs": "by example"})
        >>> page = repo.list(ListFilter(name="alice"))
        >>> page.count
        1
    """

    def __init__(
        self,
        store: OrderedStore,
        clock: Optional[Callable[[], int]] = None,
        delete_batch_size: int = 25,
    ):
        """
        Args:
            store: Ordered store adapter, owned by the caller
            clock: Millisecond clock; defaults to wall-clock time
            delete_batch_size: Keys removed per transaction in delete_by_name
        """
        self.store = store
        self.clock = clock or current_millis
        self.delete_batch_size = max(1, delete_batch_size)

    def write(self, name: Any, answers: Any) -> SurveyRecord:
        """
        Persist one submission.

        Args:
            name: Participant identifier, not necessarily unique
            answers: Mapping with optional teachLLMs / syntheticStudents

        Returns:
            The stored record

        Raises:
            ValidationError: If answers is not a mapping, a known answer is
                not a string, or name is not a string. Nothing is stored.
            StorageError: If the put fails
        """
        if not isinstance(answers, dict):
            raise ValidationError(INVALID_RESPONSE_FORMAT, field="responses")
        if not isinstance(name, str):
            raise ValidationError(INVALID_RESPONSE_FORMAT, field="name")

        try:
            parsed = SurveyAnswers.model_validate(answers)
        except PydanticValidationError as e:
            raise ValidationError(INVALID_RESPONSE_FORMAT, field="responses") from e

        record = SurveyRecord(name=name, timestamp=self.clock(), answers=parsed)
        self.store.put(record.key, record.to_store_value())

        logger.info(f"Stored survey response: name={name!r} timestamp={record.timestamp}")
        return record

    def list(self, filter: Optional[ListFilter] = None) -> SurveyPage:
        """
        List records oldest first.

        Records older than ``since`` or with a different ``name`` are
        skipped first; ``offset`` then skips that many of the survivors and
        at most ``limit`` are collected. The scan stops as soon as the page
        is full.
        """
        filter = filter or ListFilter()
        page = SurveyPage(filter=filter)
        if filter.limit == 0:
            return page

        skipped = 0
        scan = self.store.scan_prefix((RESPONSES_NAMESPACE,))
        try:
            for key, value in scan:
                record = SurveyRecord.from_store_value(value)
                if not filter.matches(record):
                    continue
                if skipped < filter.offset:
                    skipped += 1
                    continue
                page.entries.append(SurveyEntry(key=key, record=record))
                if len(page.entries) >= filter.limit:
                    break
        finally:
            scan.close()

        logger.debug(
            f"Listed {page.count} response(s): limit={filter.limit} offset={filter.offset} "
            f"since={filter.since} name={filter.name!r}"
        )
        return page

    def stats(self) -> SurveyStats:
        """Count every record, its distinct names and its timestamp range."""
        stats = SurveyStats()
        names = set()

        for _, value in self.store.scan_prefix((RESPONSES_NAMESPACE,)):
            record = SurveyRecord.from_store_value(value)
            stats.total += 1
            names.add(record.name)
            if stats.first is None or record.timestamp < stats.first:
                stats.first = record.timestamp
            if stats.last is None or record.timestamp > stats.last:
                stats.last = record.timestamp

        stats.unique_participants = len(names)
        return stats

    def delete_by_name(self, name: str) -> int:
        """
        Delete every record stored for name.

        Matching keys are collected by a full scan, then removed in batches.
        A failing batch is logged and skipped, so the store may keep some
        of the matches.

        Returns:
            Number of matching records found by the scan
        """
        keys: List[StoreKey] = [
            key
            for key, value in self.store.scan_prefix((RESPONSES_NAMESPACE,))
            if SurveyRecord.from_store_value(value).name == name
        ]

        failed = 0
        for start in range(0, len(keys), self.delete_batch_size):
            batch = keys[start:start + self.delete_batch_size]
            try:
                self.store.delete_many(batch)
            except StorageError as e:
                failed += len(batch)
                logger.error(f"Delete batch failed for name={name!r} ({len(batch)} key(s)): {e.details}")

        if failed:
            logger.warning(f"Deleted {len(keys) - failed}/{len(keys)} response(s) for name={name!r}")
        else:
            logger.info(f"Deleted {len(keys)} response(s) for name={name!r}")
        return len(keys)
