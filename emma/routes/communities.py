from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlmodel.ext.asyncio.session import AsyncSession

from emma.core.responses import success_response
from emma.db.database import get_session
from emma.db.supabase_client import get_storage_bucket
from emma.services.communities import (
    CommunityCreate,
    CommunityUpdate,
    archive_community,
    create_community,
    get_community_or_404,
    list_communities,
    set_image_url,
    update_community,
)
from emma.services.images import MAX_IMAGE_BYTES, parse_positioning, remove_image, store_image

router = APIRouter(prefix="/api/communities", tags=["Communities"])


@router.get("")
async def get_communities(
    active: Optional[str] = None,
    search: Optional[str] = None,
    area_id: Optional[UUID] = None,
    session: AsyncSession = Depends(get_session),
):
    communities = await list_communities(session, active, search, area_id)
    return success_response(communities, count=len(communities))


@router.post("")
async def post_community(payload: CommunityCreate, session: AsyncSession = Depends(get_session)):
    community = await create_community(session, payload)
    return success_response(community, message="Community created successfully", status_code=status.HTTP_201_CREATED)


@router.get("/{community_id}")
async def get_community(community_id: UUID, session: AsyncSession = Depends(get_session)):
    return success_response(await get_community_or_404(session, community_id))


@router.put("/{community_id}")
async def put_community(community_id: UUID, payload: CommunityUpdate, session: AsyncSession = Depends(get_session)):
    community = await update_community(session, community_id, payload)
    return success_response(community, message="Community updated successfully")


@router.delete("/{community_id}")
async def remove_community(community_id: UUID, session: AsyncSession = Depends(get_session)):
    archived_id = await archive_community(session, community_id)
    return success_response({"id": archived_id}, message="Community archived successfully")


@router.post("/{community_id}/image")
async def upload_community_image(
    community_id: UUID,
    file: Optional[UploadFile] = File(None),
    positioning: Optional[str] = Form(None),
    session: AsyncSession = Depends(get_session),
    bucket=Depends(get_storage_bucket),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    community = await get_community_or_404(session, community_id)
    previous_url = community.image_url
    uploaded = await store_image(
        bucket,
        f"communities/{community_id}",
        file,
        parse_positioning(positioning),
        max_bytes=MAX_IMAGE_BYTES,
    )
    await set_image_url(session, community, uploaded.url)
    await remove_image(bucket, previous_url)
    return success_response(uploaded, message="Image uploaded successfully")


@router.delete("/{community_id}/image")
async def delete_community_image(
    community_id: UUID,
    session: AsyncSession = Depends(get_session),
    bucket=Depends(get_storage_bucket),
):
    community = await get_community_or_404(session, community_id)
    if not community.image_url:
        raise HTTPException(status_code=404, detail="No image to delete")
    await remove_image(bucket, community.image_url)
    await set_image_url(session, community, None)
    return success_response({"id": community_id}, message="Image deleted successfully")
