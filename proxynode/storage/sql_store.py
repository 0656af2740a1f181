"""Feedback storage backed by a SQL database through SQLAlchemy."""

import logging

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine, delete, func, select
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..models.category import Category
from ..models.feedback import FeedbackRecord, InputModality
from .base import FeedbackStore

logger = logging.getLogger(__name__)

Base = declarative_base()


class FeedbackRow(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, autoincrement=True)
    original_text = Column(Text, nullable=False)
    anonymized_text = Column(Text, nullable=False)
    summary = Column(String(200), nullable=False)
    category = Column(String(32), nullable=False, index=True)
    input_modality = Column(String(16), nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)
    device_id = Column(String(128), nullable=False, index=True)

    @classmethod
    def from_record(cls, record: FeedbackRecord) -> "FeedbackRow":
        return cls(
            original_text=record.original_text,
            anonymized_text=record.anonymized_text,
            summary=record.summary,
            category=record.category.value,
            input_modality=record.input_modality.value,
            created_at=record.created_at,
            device_id=record.device_id,
        )

    def to_record(self) -> FeedbackRecord:
        return FeedbackRecord(
            id=self.id,
            original_text=self.original_text,
            anonymized_text=self.anonymized_text,
            summary=self.summary,
            category=Category(self.category),
            input_modality=InputModality(self.input_modality),
            created_at=self.created_at,
            device_id=self.device_id,
        )


def _engine_options(database_url: str) -> dict:
    if not database_url.startswith("sqlite"):
        return {}
    # Store calls run on worker threads
    options: dict = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every thread sees its own database
        options["poolclass"] = StaticPool
    return options


class SQLFeedbackStore(FeedbackStore):
    """Feedback storage in a single ``feedback`` table.

    The table is created on first use. Any SQLAlchemy URL works; SQLite is
    the expected default for a single device.
    """

    def __init__(self, database_url: str = "sqlite://") -> None:
        super().__init__()
        self.database_url = database_url
        self.engine = create_engine(
            database_url, echo=False, future=True, **_engine_options(database_url)
        )
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)
        logger.debug(f"Feedback table ready at {self.engine.url!r}")

    def _newest_first(self, stmt):
        return stmt.order_by(FeedbackRow.created_at.desc(), FeedbackRow.id.desc())

    def _fetch(self, stmt) -> list[FeedbackRecord]:
        with self._session_factory() as session:
            return [row.to_record() for row in session.scalars(self._newest_first(stmt))]

    def insert(self, record: FeedbackRecord) -> int:
        with self._session_factory() as session:
            row = FeedbackRow.from_record(record)
            session.add(row)
            session.commit()
            record_id = row.id
        self._notify_change()
        return record_id

    def get(self, record_id: int) -> FeedbackRecord | None:
        with self._session_factory() as session:
            row = session.get(FeedbackRow, record_id)
            return row.to_record() if row else None

    def list_all(self) -> list[FeedbackRecord]:
        return self._fetch(select(FeedbackRow))

    def list_by_device(self, device_id: str) -> list[FeedbackRecord]:
        return self._fetch(select(FeedbackRow).where(FeedbackRow.device_id == device_id))

    def list_by_category(self, category: Category) -> list[FeedbackRecord]:
        return self._fetch(select(FeedbackRow).where(FeedbackRow.category == category.value))

    def count(self) -> int:
        with self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(FeedbackRow)) or 0

    def count_by_category(self, category: Category) -> int:
        with self._session_factory() as session:
            stmt = (
                select(func.count())
                .select_from(FeedbackRow)
                .where(FeedbackRow.category == category.value)
            )
            return session.scalar(stmt) or 0

    def delete(self, record_id: int) -> bool:
        with self._session_factory() as session:
            row = session.get(FeedbackRow, record_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
        self._notify_change()
        return True

    def clear(self) -> int:
        with self._session_factory() as session:
            result = session.execute(delete(FeedbackRow))
            session.commit()
            removed = result.rowcount or 0
        self._notify_change()
        return removed

    def close(self) -> None:
        self.engine.dispose()
