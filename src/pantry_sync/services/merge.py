"""Merge of local and remote inventory snapshots."""

import logging
from collections.abc import Iterable

from pantry_sync.domain.inventory import InventoryRecord

_logger = logging.getLogger(__name__)


def merge_records(
    local: Iterable[InventoryRecord], remote: Iterable[InventoryRecord]
) -> list[InventoryRecord]:
    """Combine snapshots, keeping the local version of any shared record.

    Local records come first in their original order; remote records whose
    id is unknown locally are appended. Timestamps and contents are never
    compared, so an edit made on another device to a record that also
    exists locally is discarded.
    """
    merged = list(local)
    seen = {record.id for record in merged}
    appended = 0
    for record in remote:
        if record.id in seen:
            continue
        merged.append(record)
        seen.add(record.id)
        appended += 1
    _logger.info(
        "Merged inventory: local=%s remote_new=%s total=%s",
        len(merged) - appended,
        appended,
        len(merged),
    )
    return merged
