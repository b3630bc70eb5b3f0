"""
SQLAlchemy-backed board repository.

Each ``save_batch`` call runs in a single transaction, so a MoveResult is
either fully persisted or not at all.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from cadence.core.models import Container, Item
from cadence.store.database import create_db_engine, init_db, session_scope
from cadence.store.models import ContainerRecord, ItemRecord


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def item_from_record(record: ItemRecord) -> Item:
    return Item(
        id=record.id,
        title=record.title,
        score=record.score,
        container_id=record.container_id,
        order_key=record.order_key,
        user_id=record.user_id,
        mastered=record.mastered,
        category=record.category,
        link=record.link,
        difficulty=record.difficulty,
        notes=record.notes,
        time_complexity=record.time_complexity,
        space_complexity=record.space_complexity,
        created_at=_aware(record.created_at),
        updated_at=_aware(record.updated_at),
    )


def container_from_record(record: ContainerRecord) -> Container:
    return Container(
        id=record.id,
        name=record.name,
        order_key=record.order_key,
        slot=record.slot,
        color=record.color,
        is_default=record.is_default,
        user_id=record.user_id,
        created_at=_aware(record.created_at),
        updated_at=_aware(record.updated_at),
    )


_ITEM_FIELDS = (
    "user_id", "title", "score", "container_id", "order_key", "mastered", "category",
    "link", "difficulty", "notes", "time_complexity", "space_complexity",
    "created_at", "updated_at",
)
_CONTAINER_FIELDS = (
    "user_id", "name", "color", "order_key", "slot", "is_default", "created_at", "updated_at",
)


class SqlRepository:
    """BoardRepository over any SQLAlchemy database (SQLite by default)."""

    def __init__(self, database_url: str, echo: bool = False, create_tables: bool = True):
        self.engine = create_db_engine(database_url, echo=echo)
        self._factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        if create_tables:
            init_db(self.engine)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_items(self, user_id: str) -> list[Item]:
        with session_scope(self._factory) as session:
            rows = session.scalars(
                select(ItemRecord)
                .where(ItemRecord.user_id == user_id)
                .order_by(ItemRecord.container_id, ItemRecord.order_key)
            )
            return [item_from_record(row) for row in rows]

    def load_containers(self, user_id: str) -> list[Container]:
        with session_scope(self._factory) as session:
            rows = session.scalars(
                select(ContainerRecord)
                .where(ContainerRecord.user_id == user_id)
                .order_by(ContainerRecord.order_key)
            )
            return [container_from_record(row) for row in rows]

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    @staticmethod
    def _upsert_item(session: Session, item: Item) -> None:
        record = session.get(ItemRecord, item.id) or ItemRecord(id=item.id)
        for name in _ITEM_FIELDS:
            setattr(record, name, getattr(item, name))
        session.add(record)

    @staticmethod
    def _upsert_container(session: Session, container: Container) -> None:
        record = session.get(ContainerRecord, container.id) or ContainerRecord(id=container.id)
        for name in _CONTAINER_FIELDS:
            setattr(record, name, getattr(container, name))
        session.add(record)

    def save_item(self, item: Item) -> None:
        with session_scope(self._factory) as session:
            self._upsert_item(session, item)

    def save_container(self, container: Container) -> None:
        with session_scope(self._factory) as session:
            self._upsert_container(session, container)

    def delete_item(self, item_id: str) -> None:
        with session_scope(self._factory) as session:
            session.execute(delete(ItemRecord).where(ItemRecord.id == item_id))

    def delete_container(self, container_id: str) -> None:
        with session_scope(self._factory) as session:
            session.execute(delete(ContainerRecord).where(ContainerRecord.id == container_id))

    def save_batch(
        self,
        items: Sequence[Item],
        containers: Sequence[Container],
        deleted_item_ids: Sequence[str] = (),
        deleted_container_ids: Sequence[str] = (),
    ) -> None:
        with session_scope(self._factory) as session:
            if deleted_item_ids:
                session.execute(delete(ItemRecord).where(ItemRecord.id.in_(deleted_item_ids)))
            if deleted_container_ids:
                session.execute(
                    delete(ContainerRecord).where(ContainerRecord.id.in_(deleted_container_ids))
                )
            for item in items:
                self._upsert_item(session, item)
            for container in containers:
                self._upsert_container(session, container)
        logger.debug(
            f"Persisted batch: {len(items)} item(s), {len(containers)} container(s), "
            f"{len(deleted_item_ids) + len(deleted_container_ids)} deletion(s)"
        )
