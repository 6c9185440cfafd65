from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.db.supabase_client import get_storage_bucket
from emma.services.area_admins import (
    AreaAdminCreate,
    AreaAdminsReplace,
    add_area_admin,
    list_area_admins,
    remove_area_admin,
    replace_area_admins,
)
from emma.services.areas import (
    AreaCreate,
    AreaUpdate,
    archive_area,
    create_area,
    get_area_or_404,
    list_areas,
    set_image_url,
    update_area,
)
from emma.services.images import MAX_IMAGE_BYTES, parse_positioning, remove_image, store_image

router = APIRouter(prefix="/api/areas", tags=["Areas"])


@router.get("")
async def get_areas(
    active: Optional[str] = None,
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    areas = await list_areas(session, active, search)
    return success_response(areas, count=len(areas))


@router.post("")
async def post_area(payload: AreaCreate, session: AsyncSession = Depends(get_session)):
    area = await create_area(session, payload)
    return success_response(area, message="Area created successfully", status_code=status.HTTP_201_CREATED)


@router.get("/{area_id}")
async def get_area(area_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_area_or_404(session, area_id))


@router.put("/{area_id}")
async def put_area(area_id: UUID, payload: AreaUpdate, session: AsyncSession = Depends(get_session)):
    area = await update_area(session, area_id, payload)
    return success_response(area, message="Area updated successfully")


@router.delete("/{area_id}")
async def remove_area(area_id: UUID, session: AsyncSession = Depends(get_session)):
    archived_id = await archive_area(session, area_id)
    return success_response({"id": archived_id}, message="Area archived successfully")


@router.post("/{area_id}/image")
async def upload_area_image(
    area_id: UUID,
    file: Optional[UploadFile] = File(None),
    positioning: Optional[str] = Form(None),
    session: AsyncSession = Depends(get_session),
    bucket=Depends(get_storage_bucket),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    area = await get_area_or_404(session, area_id)
    previous_url = area.image_url
    uploaded = await store_image(
        bucket,
        f"areas/{area_id}",
        file,
        parse_positioning(positioning),
        max_bytes=MAX_IMAGE_BYTES,
    )
    await set_image_url(session, area, uploaded.url)
    await remove_image(bucket, previous_url)
    return success_response(uploaded, message="Image uploaded successfully")


@router.delete("/{area_id}/image")
async def delete_area_image(
    area_id: UUID,
    session: AsyncSession = Depends(get_session),
    bucket=Depends(get_storage_bucket),
):
    area = await get_area_or_404(session, area_id)
    if not area.image_url:
        raise HTTPException(status_code=404, detail="No image to delete")
    await remove_image(bucket, area.image_url)
    await set_image_url(session, area, None)
    return success_response({"id": area_id}, message="Image deleted successfully")


@router.get("/{area_id}/admins")
async def get_area_admins(area_id: UUID, session: AsyncSession = Depends(get_session)):
    admins = await list_area_admins(session, area_id)
    return success_response(admins, count=len(admins))


@router.post("/{area_id}/admins")
async def post_area_admin(area_id: UUID, payload: AreaAdminCreate, session: AsyncSession = Depends(get_session)):
    admin = await add_area_admin(session, area_id, payload.person_id)
    return success_response(admin, message="Admin added successfully", status_code=status.HTTP_201_CREATED)


@router.put("/{area_id}/admins")
async def put_area_admins(area_id: UUID, payload: AreaAdminsReplace, session: AsyncSession = Depends(get_session)):
    admins = await replace_area_admins(session, area_id, payload.admin_ids)
    return success_response(admins, count=len(admins), message="Admins updated successfully")


@router.delete("/{area_id}/admins")
async def delete_area_admin(
    area_id: UUID,
    person_id: Optional[UUID] = None,
    session: AsyncSession = Depends(get_session),
):
    if person_id is None:
        raise HTTPException(status_code=400, detail="Person ID is required")
    await remove_area_admin(session, area_id, person_id)
    return success_response(
        {"area_id": area_id, "person_id": person_id}, message="Admin removed successfully"
    )
