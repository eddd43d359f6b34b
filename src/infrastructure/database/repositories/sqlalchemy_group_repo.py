"""SQLAlchemy implementation of Group repository."""

from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from core.exceptions import GroupNotFoundError, GroupVersionConflictError
from domain.entities.group import (
    Collaborator,
    CollaboratorRole,
    CollaboratorStatus,
    Group,
)
from infrastructure.database.models import CollaboratorModel, GroupModel


class SQLAlchemyGroupRepository:
    """SQLAlchemy implementation of IGroupRepository.

    Groups are loaded and saved whole, roster included.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Group | None:
        """Get a group by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def get_by_tag(self, tag: str) -> Group | None:
        """Get a group by its unique tag."""
        stmt = select(GroupModel).where(GroupModel.tag == tag)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_for_user(self, user_id: str) -> list[Group]:
        """Get groups the user owns or has a roster entry in (any status)."""
        stmt = (
            select(GroupModel)
            .where(
                or_(
                    GroupModel.owner_id == user_id,
                    GroupModel.collaborators.any(CollaboratorModel.user_id == user_id),
                )
            )
            .order_by(GroupModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, group: Group) -> Group:
        """Create a new group with its initial roster."""
        model = self._to_model(group)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def save(self, group: Group) -> Group:
        """Persist a loaded group, roster included.

        Raises GroupVersionConflictError if the group was written since
        ``group.version`` was read.
        """
        model = await self._get_model(group.id)
        if not model:
            raise GroupNotFoundError(str(group.id))
        if model.version != group.version:
            raise GroupVersionConflictError(str(group.id))

        model.name = group.name
        model.color = group.color
        model.owner_name = group.owner_name
        model.owner_email = group.owner_email
        # Always dirty the row so roster-only changes still bump the version.
        model.updated_at = group.updated_at
        self._sync_collaborators(model, group.collaborators)

        try:
            await self._session.flush()
        except StaleDataError as exc:
            raise GroupVersionConflictError(str(group.id)) from exc
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a group (cascade deletes its roster)."""
        model = await self._get_model(id)
        if not model:
            return False

        await self._session.delete(model)
        try:
            await self._session.flush()
        except StaleDataError as exc:
            raise GroupVersionConflictError(str(id)) from exc
        return True

    async def _get_model(self, id: UUID) -> GroupModel | None:
        stmt = select(GroupModel).where(GroupModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _sync_collaborators(self, model: GroupModel, collaborators: list[Collaborator]) -> None:
        """Make ``model.collaborators`` match the entity roster."""
        wanted = {c.user_id: c for c in collaborators}
        existing = {m.user_id: m for m in model.collaborators}

        for user_id, member in existing.items():
            if user_id not in wanted:
                model.collaborators.remove(member)

        for user_id, collaborator in wanted.items():
            member = existing.get(user_id)
            if member is None:
                model.collaborators.append(self._collaborator_to_model(collaborator, model.id))
                continue
            member.name = collaborator.name
            member.email = collaborator.email
            member.picture = collaborator.picture
            member.role = collaborator.role.value
            member.status = collaborator.status.value
            member.accepted_at = collaborator.accepted_at

    def _to_entity(self, model: GroupModel) -> Group:
        """Convert ORM model to domain entity."""
        return Group(
            id=model.id,
            tag=model.tag,
            name=model.name,
            color=model.color,
            owner_id=model.owner_id,
            owner_name=model.owner_name,
            owner_email=model.owner_email,
            collaborators=[self._collaborator_to_entity(m) for m in model.collaborators],
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Group) -> GroupModel:
        """Convert domain entity to ORM model."""
        return GroupModel(
            id=entity.id,
            tag=entity.tag,
            name=entity.name,
            color=entity.color,
            owner_id=entity.owner_id,
            owner_name=entity.owner_name,
            owner_email=entity.owner_email,
            collaborators=[
                self._collaborator_to_model(c, entity.id) for c in entity.collaborators
            ],
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def _collaborator_to_entity(self, model: CollaboratorModel) -> Collaborator:
        """Convert roster ORM model to domain entity."""
        return Collaborator(
            user_id=model.user_id,
            name=model.name,
            email=model.email,
            picture=model.picture,
            role=CollaboratorRole(model.role),
            status=CollaboratorStatus(model.status),
            invited_at=model.invited_at,
            accepted_at=model.accepted_at,
        )

    def _collaborator_to_model(self, entity: Collaborator, group_id: UUID) -> CollaboratorModel:
        """Convert roster domain entity to ORM model."""
        return CollaboratorModel(
            group_id=group_id,
            user_id=entity.user_id,
            name=entity.name,
            email=entity.email,
            picture=entity.picture,
            role=entity.role.value,
            status=entity.status.value,
            invited_at=entity.invited_at,
            accepted_at=entity.accepted_at,
        )
