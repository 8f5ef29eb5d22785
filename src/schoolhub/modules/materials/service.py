"""
Material Service Layer

Course materials are links, text or uploaded files. Whoever may read the
course may read its materials; the roster is notified when one is added.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from schoolhub.core.auth import Actor
from schoolhub.core.config import settings
from schoolhub.core.exceptions import NotFoundError, ValidationError
from schoolhub.core.policy import Action, require
from schoolhub.core.storage import ObjectStore
from schoolhub.modules.attachments import service as attachments
from schoolhub.modules.attachments.models import AttachmentParent
from schoolhub.modules.courses import repository as course_repository
from schoolhub.modules.courses.service import build_scope, get_course_or_404
from schoolhub.modules.materials import repository
from schoolhub.modules.materials.models import Material, MaterialType
from schoolhub.modules.materials.schemas import MaterialCreate, MaterialResponse
from schoolhub.modules.notifications import service as notifications
from schoolhub.modules.notifications.models import NotificationKind

logger = logging.getLogger(__name__)


async def to_responses(db: AsyncSession, materials: list[Material]) -> list[MaterialResponse]:
    grouped = await attachments.list_for(
        db, AttachmentParent.MATERIAL, [m.id for m in materials]
    )
    responses = []
    for material in materials:
        response = MaterialResponse.model_validate(material)
        response.attachments = grouped.get(material.id, [])
        responses.append(response)
    return responses


async def list_materials(db: AsyncSession, actor: Actor, course_id: str) -> list[Material]:
    course = await get_course_or_404(db, course_id)
    scope = await build_scope(db, course)
    require(actor, Action.READ_COURSE, scope, "You must be enrolled to view course materials")
    return await repository.list_for_course(db, course.id)


async def add_material(
    db: AsyncSession,
    store: ObjectStore,
    actor: Actor,
    course_id: str,
    data: MaterialCreate,
    files: list[UploadFile],
) -> Material:
    """
    Add a material to a course.

    A material needs a URL or at least one uploaded file; text materials
    may carry their body in `content` instead. Without a URL the first
    uploaded file's URL is used.

    Raises:
        NotFoundError: Unknown course
        ForbiddenError: Not the course teacher nor an admin
        ValidationError: No URL, file or text content
        PayloadTooLargeError: A file exceeds the material limit
    """
    course = await get_course_or_404(db, course_id)
    scope = await build_scope(db, course, with_roster=False)
    require(
        actor,
        Action.MANAGE_MATERIALS,
        scope,
        "Only the course teacher or an administrator can add materials",
    )

    has_text = data.type == MaterialType.TEXT and bool(data.content and data.content.strip())
    if not data.url and not files and not has_text:
        raise ValidationError("Please provide a URL for the material or upload a file")

    uploads = await attachments.read_uploads(files, settings.max_material_file_bytes)
    try:
        material = await repository.create(
            db,
            course_id=course.id,
            title=data.title,
            description=data.description,
            type=data.type,
            url=data.url,
            content=data.content,
            added_by=actor.id,
        )
        stored = await attachments.store_uploads(
            db,
            store,
            uploads,
            parent=AttachmentParent.MATERIAL,
            parent_id=material.id,
            uploaded_by=actor.id,
        )
        if material.url is None and stored:
            material.url = stored[0].url
            await db.flush()
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Material {material.id} added to course {course.id} by {actor.id}")
    roster = await course_repository.get_roster_ids(db, course.id)
    await notifications.emit(
        db,
        roster,
        title="New course material",
        message=f"{material.title} was added to {course.name}.",
        kind=NotificationKind.MATERIAL,
        resource_type="material",
        resource_id=material.id,
    )
    return material


async def remove_material(
    db: AsyncSession, store: ObjectStore, actor: Actor, course_id: str, material_id: str
) -> None:
    course = await get_course_or_404(db, course_id)
    scope = await build_scope(db, course, with_roster=False)
    require(
        actor,
        Action.MANAGE_MATERIALS,
        scope,
        "Only the course teacher or an administrator can remove materials",
    )

    material = await repository.get_by_id(db, material_id)
    if material is None or material.course_id != course.id:
        raise NotFoundError("Material", material_id)

    keys = await repository.storage_keys(db, material.id)
    await repository.delete_with_attachments(db, material)
    await db.commit()
    logger.info(f"Material {material_id} removed from course {course.id} by {actor.id}")

    await attachments.discard_objects(store, keys)
