"""Process-wide cache of accessory records keyed by identity."""

from __future__ import annotations

from collections.abc import Callable, Iterator

from .models import AccessoryRecord


class AccessoryCache:
    """Map identities to the single live record for each accessory."""

    def __init__(self) -> None:
        """Start with an empty cache."""

        self._records: dict[str, AccessoryRecord] = {}

    def get(self, identity: str) -> AccessoryRecord | None:
        """Return the record for ``identity`` when cached."""

        return self._records.get(identity)

    def put(self, identity: str, record: AccessoryRecord) -> AccessoryRecord:
        """Store ``record`` under ``identity``; the last write wins."""

        if record.identity != identity:
            raise ValueError(
                f"Record identity {record.identity} does not match key {identity}"
            )
        self._records[identity] = record
        return record

    def get_or_insert(
        self, identity: str, factory: Callable[[], AccessoryRecord]
    ) -> tuple[AccessoryRecord, bool]:
        """Return the cached record, creating it with ``factory`` if absent.

        The second element of the result is True when a record was created.
        """

        record = self._records.get(identity)
        if record is not None:
            return record, False
        return self.put(identity, factory()), True

    def values(self) -> list[AccessoryRecord]:
        """Return a snapshot of every cached record."""

        return list(self._records.values())

    def __contains__(self, identity: object) -> bool:
        return identity in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._records))
