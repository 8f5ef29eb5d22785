"""
Materials Router (mounted under /courses)

Endpoints:
- GET /courses/{id}/materials - Materials of a course
- POST /courses/{id}/materials - Add a material (JSON or multipart with files)
- DELETE /courses/{id}/materials/{material_id} - Remove a material
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor, get_current_actor
from schoolhub.core.database import get_db
from schoolhub.core.storage import ObjectStore, get_object_store
from schoolhub.modules.materials import service
from schoolhub.modules.materials.schemas import MaterialCreate, MaterialResponse
from schoolhub.modules.shared import ApiResponse, ok
from schoolhub.modules.shared.forms import parse_payload

router = APIRouter()


@router.get(
    "/{course_id}/materials",
    response_model=ApiResponse[list[MaterialResponse]],
    summary="Course Materials",
)
async def list_materials(
    course_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    materials = await service.list_materials(db, actor, course_id)
    return ok(await service.to_responses(db, materials))


@router.post(
    "/{course_id}/materials",
    response_model=ApiResponse[MaterialResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add Material",
)
async def add_material(
    course_id: str,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    data, files = await parse_payload(request, MaterialCreate)
    material = await service.add_material(db, store, actor, course_id, data, files)
    [response] = await service.to_responses(db, [material])
    return ok(response, "Material added")


@router.delete(
    "/{course_id}/materials/{material_id}",
    response_model=ApiResponse[None],
    summary="Remove Material",
)
async def remove_material(
    course_id: str,
    material_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    await service.remove_material(db, store, actor, course_id, material_id)
    return ok(message="Material removed")
