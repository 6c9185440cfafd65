from fastapi import APIRouter

from emma.core import config
from emma.core.responses import success_response

router = APIRouter(prefix="/api/config", tags=["Config"])


@router.get("")
async def get_public_config():
    return success_response(
        {
            "auth0_domain": config.AUTH0_DOMAIN,
            "auth0_client_id": config.AUTH0_CLIENT_ID,
            "google_maps_api_key": config.GOOGLE_MAPS_API_KEY,
        }
    )
