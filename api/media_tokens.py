"""Media-room token issuing; starting a room also starts its interview agent."""
from __future__ import annotations

import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException
from livekit import api as livekit_api

from api.dependencies import get_registry, get_settings
from api.schemas import TokenReq, TokenResp
from config import Settings
from interview_agent import SessionParams
from services.sessions import SessionRegistry


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/livekit")

CANDIDATE_IDENTITY = "candidate"


class MediaTokenConfigError(RuntimeError):  # LiveKit credentials missing
    pass


def new_room_name() -> str:
    return f"interview-{uuid4()}"


def mint_room_token(cfg: Settings, room_name: str, identity: str = CANDIDATE_IDENTITY) -> str:
    if not cfg.LIVEKIT_API_KEY or not cfg.LIVEKIT_API_SECRET:
        raise MediaTokenConfigError("LIVEKIT_API_KEY and LIVEKIT_API_SECRET must be set")
    grants = livekit_api.VideoGrants(
        room=room_name,
        room_join=True,
        can_publish=True,
        can_subscribe=True,
    )
    token = (
        livekit_api.AccessToken(cfg.LIVEKIT_API_KEY, cfg.LIVEKIT_API_SECRET)
        .with_identity(identity)
        .with_name(identity)
        .with_grants(grants)
    )
    return token.to_jwt()


@router.post("/token", response_model=TokenResp)
def issue_token(
    payload: TokenReq,
    registry: SessionRegistry = Depends(get_registry),
    cfg: Settings = Depends(get_settings),
) -> TokenResp:
    if not payload.role or not payload.requirements or not payload.resumeUrl:
        raise HTTPException(status_code=400, detail="Missing required fields")
    room_name = new_room_name()
    try:
        jwt = mint_room_token(cfg, room_name)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error generating token")
        raise HTTPException(status_code=500, detail="Failed to generate token") from exc
    try:
        registry.create(
            SessionParams(
                room_name=room_name,
                role=payload.role,
                requirements=payload.requirements,
                resume_url=payload.resumeUrl,
                github_url=payload.githubUrl or None,
            )
        )
    except Exception:  # noqa: BLE001
        logger.exception("Failed to start agent room=%s", room_name)
    return TokenResp(token=jwt, roomUrl=cfg.LIVEKIT_URL, room=room_name)
