"""Domain models for the food inventory."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from uuid import UUID, uuid4

EXPIRING_SOON_DAYS = 3


class Category(StrEnum):
    """Closed set of food categories."""

    VEGETABLE = "vegetable"
    FRUIT = "fruit"
    MEAT = "meat"
    SEAFOOD = "seafood"
    DAIRY = "dairy"
    GRAIN = "grain"
    CONDIMENT = "condiment"
    BEVERAGE = "beverage"
    SNACK = "snack"
    OTHER = "other"


class Tag(StrEnum):
    """Descriptive storage tags for an item."""

    REFRIGERATED = "refrigerated"
    FROZEN = "frozen"
    ROOM_TEMPERATURE = "room_temperature"
    FAVORITE = "favorite"
    LEFTOVER = "leftover"


@dataclass(frozen=True)
class InventoryRecord:
    """A perishable item held in the inventory."""

    id: UUID
    name: str
    category: Category
    expiration_date: datetime
    added_date: datetime
    tags: tuple[Tag, ...] = ()
    notes: str | None = None

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        name: str,
        category: Category,
        expiration_date: datetime,
        tags: tuple[Tag, ...] | list[Tag] = (),
        notes: str | None = None,
        now: datetime | None = None,
    ) -> "InventoryRecord":
        """Create a record with a fresh identifier; naive times are UTC."""
        return cls(
            id=uuid4(),
            name=name,
            category=category,
            expiration_date=_parse_timestamp(expiration_date),
            added_date=_parse_timestamp(now or datetime.now(tz=UTC)),
            tags=_unique_tags(tags),
            notes=notes,
        )

    def days_remaining(self, now: datetime | None = None) -> int:
        """Whole days until expiration, truncated toward zero."""
        delta = self.expiration_date - (now or datetime.now(tz=UTC))
        return int(delta / timedelta(days=1))

    def is_expiring_soon(self, now: datetime | None = None) -> bool:
        """Return True when the item expires within the next few days."""
        return 0 <= self.days_remaining(now) <= EXPIRING_SOON_DAYS

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True when the expiration date has passed."""
        return self.days_remaining(now) < 0


@dataclass(frozen=True)
class RemoteRecord:
    """A record as stored remotely, with its server write timestamp."""

    record: InventoryRecord
    synced_at: datetime | None = field(default=None, compare=False)

    @property
    def id(self) -> UUID:
        return self.record.id


def record_to_payload(record: InventoryRecord) -> dict[str, object]:
    """Serialize a record into a JSON-compatible dict."""
    return {
        "id": str(record.id),
        "name": record.name,
        "category": record.category.value,
        "tags": [tag.value for tag in record.tags],
        "expiration_date": record.expiration_date.isoformat(),
        "added_date": record.added_date.isoformat(),
        "notes": record.notes,
    }


def record_from_payload(payload: dict[str, object]) -> InventoryRecord:
    """Parse a serialized record; raises ValueError on malformed identity."""
    raw_tags = payload.get("tags") or []
    tags: list[Tag] = []
    if isinstance(raw_tags, list):
        for value in raw_tags:
            try:
                tags.append(Tag(value))
            except ValueError:
                continue
    notes = payload.get("notes")
    return InventoryRecord(
        id=UUID(str(payload["id"])),
        name=str(payload.get("name", "")),
        category=Category(payload.get("category")),
        expiration_date=_parse_timestamp(payload["expiration_date"]),
        added_date=_parse_timestamp(payload["added_date"]),
        tags=_unique_tags(tags),
        notes=None if notes is None else str(notes),
    )


def sample_records(now: datetime | None = None) -> list[InventoryRecord]:
    """Return the first-run seed inventory."""
    current = now or datetime.now(tz=UTC)
    return [
        InventoryRecord.create(
            name="Milk",
            category=Category.DAIRY,
            expiration_date=current + timedelta(days=5),
            tags=[Tag.REFRIGERATED],
            now=current,
        ),
        InventoryRecord.create(
            name="Apples",
            category=Category.FRUIT,
            expiration_date=current + timedelta(days=7),
            tags=[Tag.REFRIGERATED],
            now=current,
        ),
        InventoryRecord.create(
            name="Chicken",
            category=Category.MEAT,
            expiration_date=current + timedelta(days=2),
            tags=[Tag.FROZEN],
            notes="For the weekend barbecue",
            now=current,
        ),
    ]


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def _unique_tags(tags: tuple[Tag, ...] | list[Tag]) -> tuple[Tag, ...]:
    return tuple(dict.fromkeys(tags))
