"""Resource lifecycle: publishing and removing shared files."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from campus_share.core.errors import ForbiddenError
from campus_share.models.resource import Resource
from campus_share.models.user import User
from campus_share.repositories.resource_repo import ResourceRepository
from campus_share.services.storage import LocalFileStorage

logger = logging.getLogger(__name__)


def create_resource(
    db: Session,
    uploader: User,
    *,
    title: str,
    description: str,
    department: str,
    subject: str,
    semester: int,
    file_location: str,
    external_storage_id: str | None = None,
) -> Resource:
    """Publish a resource owned by ``uploader``."""
    resource = ResourceRepository(db).create(
        title=title.strip(),
        description=description.strip(),
        department=department.strip(),
        subject=subject.strip(),
        semester=semester,
        file_location=file_location,
        external_storage_id=external_storage_id,
        uploaded_by_id=uploader.id,
    )
    db.commit()
    db.refresh(resource)
    logger.info("User %s published resource %s", uploader.id, resource.id)
    return resource


def can_delete(resource: Resource, user: User) -> bool:
    """Return True when ``user`` uploaded ``resource`` or is an admin."""
    return user.is_admin or resource.uploaded_by_id == user.id


def delete_resource(
    db: Session,
    resource_id: int,
    actor: User,
    *,
    storage: LocalFileStorage,
) -> None:
    """Delete a resource, its votes and its local file.

    Raises:
        NotFoundError: If the resource does not exist.
        ForbiddenError: If ``actor`` is neither the uploader nor an admin.
    """
    repo = ResourceRepository(db)
    resource = repo.require(resource_id)
    if not can_delete(resource, actor):
        raise ForbiddenError("Access denied. Only the uploader or admin can delete this resource.")

    file_location = resource.file_location
    repo.delete(resource)
    db.commit()
    storage.delete(file_location)
    logger.info("User %s deleted resource %s", actor.id, resource_id)
