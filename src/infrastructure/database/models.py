"""SQLAlchemy ORM models."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class GroupModel(Base):
    """Group model.

    ``version`` is SQLAlchemy's version counter: every UPDATE is issued with
    ``WHERE version = <loaded>`` and bumps it, so a concurrent writer's flush
    fails with ``StaleDataError`` instead of overwriting the roster.
    """

    __tablename__ = "groups"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    tag: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="#6366f1")
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    owner_name: Mapped[str | None] = mapped_column(String(255))
    owner_email: Mapped[str | None] = mapped_column(String(255))
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    collaborators: Mapped[list["CollaboratorModel"]] = relationship(
        "CollaboratorModel",
        back_populates="group",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="CollaboratorModel.invited_at",
    )

    __mapper_args__ = {"version_id_col": version}


class CollaboratorModel(Base):
    """Group roster entry (composite PK on group_id + user_id)."""

    __tablename__ = "group_collaborators"

    group_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("groups.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(128), primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    picture: Mapped[str | None] = mapped_column(String(500))
    role: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint("role IN ('viewer', 'editor', 'admin')"),
        nullable=False,
        default="viewer",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint("status IN ('pending', 'accepted', 'declined')"),
        nullable=False,
        default="pending",
    )
    invited_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Relationships
    group: Mapped["GroupModel"] = relationship("GroupModel", back_populates="collaborators")


class TaskModel(Base):
    """Task model.

    ``group_tag`` is a plain string rather than a foreign key: a task names
    its group by tag, and ``NULL`` means the owner's personal board.
    """

    __tablename__ = "tasks"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="General")
    priority: Mapped[str] = mapped_column(
        String(10),
        CheckConstraint("priority IN ('High', 'Medium', 'Low')"),
        nullable=False,
        default="Medium",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint("status IN ('pending', 'in-progress', 'completed')"),
        nullable=False,
        default="pending",
    )
    due_date: Mapped[datetime | None] = mapped_column(DateTime)
    progress: Mapped[int | None] = mapped_column(Integer)
    group_tag: Mapped[str | None] = mapped_column(String(100), index=True)
    assigned_to: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    assignee_snapshots: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, default=list
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


class ActivityLogModel(Base):
    """Activity log model for the group and personal activity feeds."""

    __tablename__ = "activity_logs"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    actor_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    actor_name: Mapped[str | None] = mapped_column(String(255))
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    group_tag: Mapped[str | None] = mapped_column(String(100), index=True)
    task_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True))
    task_title: Mapped[str | None] = mapped_column(String(500))
    from_status: Mapped[str | None] = mapped_column(String(20))
    to_status: Mapped[str | None] = mapped_column(String(20))
    target_user_id: Mapped[str | None] = mapped_column(String(128))
    changes: Mapped[dict[str, Any] | None] = mapped_column(JSONB)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata",
        JSONB,
        default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        index=True,
    )
