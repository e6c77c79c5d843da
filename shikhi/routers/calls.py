import time
from typing import Literal

from agora_token_builder import RtcTokenBuilder
from fastapi import APIRouter, Depends, Query

from shikhi import config
from shikhi.auth.dependencies import get_current_user
from shikhi.utils.exceptions import ServiceUnavailableError, bad_request
from shikhi.utils.logger import get_logger

router = APIRouter(prefix="/call", tags=["Calls"])

logger = get_logger("API:/api/call/token")

# RtcTokenBuilder role values
ROLE_PUBLISHER = 1
ROLE_SUBSCRIBER = 2

PLACEHOLDER_VALUES = {"", "your_agora_app_id_here", "your_agora_app_certificate_here"}


@router.get("/token")
async def get_call_token(
    channel: str = Query(None),
    role: Literal["publisher", "subscriber"] = "publisher",
    current_user=Depends(get_current_user),
):
    if not channel:
        bad_request("Channel name required")

    app_id_set = config.AGORA_APP_ID not in PLACEHOLDER_VALUES
    certificate_set = config.AGORA_APP_CERTIFICATE not in PLACEHOLDER_VALUES
    if not (app_id_set and certificate_set):
        logger.error("Agora credentials not configured")
        raise ServiceUnavailableError(
            "Calling service not configured",
            details={"appIdSet": app_id_set, "certificateSet": certificate_set},
        )

    # uid 0 lets the media service assign one
    uid = 0
    expires_at = int(time.time()) + config.CALL_TOKEN_TTL_SECONDS
    token = RtcTokenBuilder.buildTokenWithUid(
        config.AGORA_APP_ID,
        config.AGORA_APP_CERTIFICATE,
        channel,
        uid,
        ROLE_PUBLISHER if role == "publisher" else ROLE_SUBSCRIBER,
        expires_at,
    )

    return {
        "success": True,
        "token": token,
        "appId": config.AGORA_APP_ID,
        "channel": channel,
        "uid": uid,
        "expiresIn": config.CALL_TOKEN_TTL_SECONDS,
    }
