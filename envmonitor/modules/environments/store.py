from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Engine, Row

from envmonitor.modules.environments.models import (
    EDITABLE_FIELDS,
    EnvironmentRecord,
    environments_table,
    generate_environment_id,
    metadata,
)
import logging

logger = logging.getLogger(__name__)

_TICK = timedelta(microseconds=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _to_record(row: Row) -> EnvironmentRecord:
    return EnvironmentRecord(
        id=row.id,
        name=row.name,
        url=row.url,
        version=row.version,
        status=row.status,
        notes=row.notes,
        last_updated=row.last_updated.replace(tzinfo=timezone.utc),
    )


class EnvironmentStore:
    """Data access for the environments table.

    Every write runs in its own transaction and is committed before returning.
    Nothing here validates input; that is the API layer's job.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def create_schema(self) -> None:
        metadata.create_all(self.engine)

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(environments_table)).scalar_one()

    def get_all(self) -> List[EnvironmentRecord]:
        """All records, most recently updated first"""
        stmt = select(environments_table).order_by(environments_table.c.last_updated.desc())
        with self.engine.connect() as conn:
            return [_to_record(row) for row in conn.execute(stmt)]

    def get_by_id(self, environment_id: str) -> Optional[EnvironmentRecord]:
        stmt = select(environments_table).where(environments_table.c.id == environment_id)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).first()
        return _to_record(row) if row else None

    def create(self, data: Mapping[str, Any]) -> EnvironmentRecord:
        values = {field: data.get(field) for field in EDITABLE_FIELDS}
        values["id"] = generate_environment_id()
        values["last_updated"] = utcnow()

        with self.engine.begin() as conn:
            conn.execute(insert(environments_table).values(**values))

        logger.debug(f"Created environment {values['id']}")
        values["last_updated"] = values["last_updated"].replace(tzinfo=timezone.utc)
        return EnvironmentRecord(**values)

    def update(self, environment_id: str, changes: Mapping[str, Any]) -> Optional[EnvironmentRecord]:
        """Merge changes into an existing record.

        Keys present in changes overwrite the stored value, None included; absent
        keys keep theirs. Returns None when the id does not exist.
        """
        table = environments_table
        with self.engine.begin() as conn:
            current = conn.execute(
                select(table.c.last_updated).where(table.c.id == environment_id)
            ).first()
            if current is None:
                return None

            values: Dict[str, Any] = {
                field: changes[field] for field in EDITABLE_FIELDS if field in changes
            }
            # last_updated must move forward even when the clock has not
            now = utcnow()
            values["last_updated"] = now if now > current.last_updated else current.last_updated + _TICK

            conn.execute(update(table).where(table.c.id == environment_id).values(**values))
            row = conn.execute(select(table).where(table.c.id == environment_id)).first()

        logger.debug(f"Updated environment {environment_id}: {sorted(values)}")
        return _to_record(row)

    def delete(self, environment_id: str) -> bool:
        """Hard delete; False when nothing matched"""
        with self.engine.begin() as conn:
            result = conn.execute(
                delete(environments_table).where(environments_table.c.id == environment_id)
            )
        return result.rowcount > 0

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(select(1))
