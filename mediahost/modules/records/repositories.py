from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol, Type, TypeVar

from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from mediahost.core.logging import get_logger

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=SQLModel)


class RecordStore(Protocol):
    """Anything that can apply a single field-set update to a record by id."""

    async def find_and_update_by_id(
        self,
        record_type: Type[RecordT],
        record_id: Any,
        fields: Dict[str, Any],
        validate: bool = True
    ) -> Optional[RecordT]:
        ...


class SQLModelRecordStore:
    """Record store backed by an async SQLModel session factory."""

    def __init__(self, session_maker: sessionmaker):
        self.session_maker = session_maker

    async def find_and_update_by_id(
        self,
        record_type: Type[RecordT],
        record_id: Any,
        fields: Dict[str, Any],
        validate: bool = True
    ) -> Optional[RecordT]:
        """
        Apply `fields` to the record and return the post-update row.

        Returns None when no row has that id. With validate=True the merged
        row is checked against the model's own constraints first, so a bad
        value raises pydantic's ValidationError and nothing is written.
        """
        async with self.session_maker() as session:
            record = await session.get(record_type, record_id)
            if record is None:
                return None

            unknown = set(fields) - set(record_type.model_fields)
            if unknown:
                raise ValueError(
                    f"Unknown fields for {record_type.__name__}: {', '.join(sorted(unknown))}"
                )

            updates = dict(fields)
            if "updated_at" in record_type.model_fields and "updated_at" not in updates:
                updates["updated_at"] = datetime.now(timezone.utc)

            if validate:
                candidate = record.model_dump()
                candidate.update(updates)
                validated = record_type.model_validate(candidate)
                updates = {key: getattr(validated, key) for key in updates}

            for key, value in updates.items():
                setattr(record, key, value)

            session.add(record)
            await session.commit()
            await session.refresh(record)

            logger.debug(
                "record_updated",
                record_type=record_type.__name__,
                record_id=str(record_id),
                fields=sorted(fields)
            )
            return record
