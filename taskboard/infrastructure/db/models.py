"""
SQLAlchemy ORM models

Every per-user row carries user_id; mutable rows carry updated_at and a
nullable deleted_at tombstone. Ids are 27-char KSUIDs (see taskboard.domain.ids).
"""
from datetime import date as date_type, datetime

from sqlalchemy import (
    Boolean, CheckConstraint, Date, ForeignKey, Index, Integer, String, Text,
    TIMESTAMP, UniqueConstraint, false, func,
)
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.domain.ids import ID_LENGTH
from taskboard.infrastructure.db.session import Base


# byte-order comparison on PostgreSQL, so `id > after_id` follows KSUID order
ID = String(ID_LENGTH).with_variant(String(ID_LENGTH, collation="C"), "postgresql")


def _live(model):
    """WHERE clause for partial indexes over live rows"""
    return model.deleted_at.is_(None)


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)


Index(
    "uq_users_email_live", func.lower(UserModel.email), unique=True,
    postgresql_where=_live(UserModel), sqlite_where=_live(UserModel),
)


class UserDeviceModel(Base):
    """
    One active (detached = false) device per (user_id, user_agent)
    """
    __tablename__ = "user_devices"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    user_id: Mapped[str] = mapped_column(ID, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    user_agent: Mapped[str] = mapped_column(String(512), nullable=False)
    ip: Mapped[str] = mapped_column(String(64), nullable=False)
    detached: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    latest_login_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    detached_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)


Index(
    "uq_user_devices_active", UserDeviceModel.user_id, UserDeviceModel.user_agent, unique=True,
    postgresql_where=UserDeviceModel.detached.is_(False),
    sqlite_where=UserDeviceModel.detached.is_(False),
)


class SessionModel(Base):
    """
    Refresh session. Expired sessions are the only rows ever hard-deleted.
    """
    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(ID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    device_id: Mapped[str] = mapped_column(ID, ForeignKey("user_devices.id", ondelete="CASCADE"), nullable=False)
    refresh_token: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    last_visit_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)


class ListModel(Base):
    __tablename__ = "lists"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[str] = mapped_column(ID, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)


Index(
    "ix_lists_user_id_live", ListModel.user_id,
    postgresql_where=_live(ListModel), sqlite_where=_live(ListModel),
)
Index(
    "uq_lists_default_per_user", ListModel.user_id, unique=True,
    postgresql_where=ListModel.is_default.is_(True) & _live(ListModel),
    sqlite_where=ListModel.is_default.is_(True) & _live(ListModel),
)


class HeadingModel(Base):
    __tablename__ = "headings"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    list_id: Mapped[str] = mapped_column(ID, ForeignKey("lists.id", ondelete="RESTRICT"), nullable=False)
    user_id: Mapped[str] = mapped_column(ID, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)


Index(
    "ix_headings_user_id_live", HeadingModel.user_id,
    postgresql_where=_live(HeadingModel), sqlite_where=_live(HeadingModel),
)
Index("ix_headings_list_id", HeadingModel.list_id)
Index(
    "uq_headings_default_per_list", HeadingModel.list_id, unique=True,
    postgresql_where=HeadingModel.is_default.is_(True) & _live(HeadingModel),
    sqlite_where=HeadingModel.is_default.is_(True) & _live(HeadingModel),
)


class StatusModel(Base):
    __tablename__ = "statuses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)


class TaskModel(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    start_date: Mapped[date_type | None] = mapped_column(Date, nullable=True)
    deadline: Mapped[date_type | None] = mapped_column(Date, nullable=True)
    start_time: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    status_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("statuses.id", ondelete="RESTRICT", name="fk_tasks_status_id"), nullable=False
    )
    list_id: Mapped[str] = mapped_column(
        ID, ForeignKey("lists.id", ondelete="RESTRICT", name="fk_tasks_list_id"), nullable=False
    )
    heading_id: Mapped[str] = mapped_column(
        ID, ForeignKey("headings.id", ondelete="RESTRICT", name="fk_tasks_heading_id"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        ID, ForeignKey("users.id", ondelete="RESTRICT", name="fk_tasks_user_id"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "(start_time IS NULL AND end_time IS NULL) OR "
            "(start_time IS NOT NULL AND end_time IS NOT NULL AND start_time < end_time)",
            name="ck_tasks_time_range",
        ),
    )


Index(
    "ix_tasks_user_id_live", TaskModel.user_id,
    postgresql_where=_live(TaskModel), sqlite_where=_live(TaskModel),
)
Index("ix_tasks_user_start_date", TaskModel.user_id, TaskModel.start_date)
Index("ix_tasks_user_deadline", TaskModel.user_id, TaskModel.deadline)
Index("ix_tasks_heading_id", TaskModel.heading_id)
Index("ix_tasks_list_id", TaskModel.list_id)


class TagModel(Base):
    """
    Tag titles are stored lower-cased
    """
    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    title: Mapped[str] = mapped_column(String(50), nullable=False)
    user_id: Mapped[str] = mapped_column(ID, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)


Index(
    "ix_tags_user_id_live", TagModel.user_id,
    postgresql_where=_live(TagModel), sqlite_where=_live(TagModel),
)
Index(
    "uq_tags_user_title_live", TagModel.user_id, func.lower(TagModel.title), unique=True,
    postgresql_where=_live(TagModel), sqlite_where=_live(TagModel),
)


class TaskTagModel(Base):
    """
    Task <-> tag link. The serial id keeps the order in which tags were linked.
    """
    __tablename__ = "task_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[str] = mapped_column(ID, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    tag_id: Mapped[str] = mapped_column(ID, ForeignKey("tags.id", ondelete="RESTRICT"), nullable=False)

    __table_args__ = (
        UniqueConstraint("task_id", "tag_id", name="uq_task_tags_task_tag"),
        Index("ix_task_tags_tag_id", "tag_id"),
    )
