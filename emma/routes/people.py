from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.db.supabase_client import get_storage_bucket
from emma.services.images import parse_positioning, remove_image, store_image
from emma.services.people import (
    PersonCreate,
    PersonUpdate,
    create_person,
    delete_person,
    get_person_or_404,
    list_people,
    set_photo_url,
    update_person,
)

router = APIRouter(prefix="/api/people", tags=["People"])


@router.get("")
async def get_people(
    active: Optional[str] = None,
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
):
    people = await list_people(session, active, search)
    return success_response(people, count=len(people))


@router.post("")
async def post_person(payload: PersonCreate, session: AsyncSession = Depends(get_session)):
    person = await create_person(session, payload)
    return success_response(person, message="Person created successfully", status_code=status.HTTP_201_CREATED)


@router.get("/{person_id}")
async def get_person(person_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_person_or_404(session, person_id))


@router.put("/{person_id}")
async def put_person(person_id: UUID, payload: PersonUpdate, session: AsyncSession = Depends(get_session)):
    person = await update_person(session, person_id, payload)
    return success_response(person, message="Person updated successfully")


@router.delete("/{person_id}")
async def remove_person(person_id: UUID, session: AsyncSession = Depends(get_session)):
    deleted_id = await delete_person(session, person_id)
    return success_response({"id": deleted_id}, message="Person deleted successfully")


@router.api_route("/{person_id}/photo", methods=["POST", "PUT"])
async def upload_photo(
    person_id: UUID,
    file: Optional[UploadFile] = File(None),
    positioning: Optional[str] = Form(None),
    session: AsyncSession = Depends(get_session),
    bucket=Depends(get_storage_bucket),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    person = await get_person_or_404(session, person_id)
    previous_url = person.photo_url
    uploaded = await store_image(bucket, f"people/{person_id}", file, parse_positioning(positioning))
    await set_photo_url(session, person, uploaded.url)
    await remove_image(bucket, previous_url)
    return success_response(uploaded, message="Photo uploaded successfully")


@router.delete("/{person_id}/photo")
async def delete_photo(
    person_id: UUID,
    session: AsyncSession = Depends(get_session),
    bucket=Depends(get_storage_bucket),
):
    person = await get_person_or_404(session, person_id)
    if not person.photo_url:
        raise HTTPException(status_code=404, detail="No photo to delete")
    await remove_image(bucket, person.photo_url)
    await set_photo_url(session, person, None)
    return success_response({"id": person_id}, message="Photo deleted successfully")
