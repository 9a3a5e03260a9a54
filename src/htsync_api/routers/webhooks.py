"""Webhook endpoints — signup, password change, password reset, deletion."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, ValidationError

from htsync_common import UserRecord

from htsync.engine import SyncEngine
from htsync.errors import InvalidInput

from htsync_api.deps import get_engine, verify_token

router = APIRouter(tags=["webhooks"], dependencies=[Depends(verify_token)])

log = logging.getLogger(__name__)


class SignupPayload(BaseModel):
    user: dict[str, Any]


class PasswordChangePayload(BaseModel):
    identity: str = Field(min_length=1)
    old_secret: str = Field(min_length=1, alias="oldSecret")
    new_secret: str = Field(min_length=1, alias="newSecret")


class IdentityPayload(BaseModel):
    identity: str = Field(min_length=1)


@router.post("/webhook/user-signup")
async def user_signup(payload: SignupPayload, engine: SyncEngine = Depends(get_engine)):
    """Sync a newly signed-up directory user and issue a temporary secret."""
    try:
        record = UserRecord.model_validate(payload.user)
    except ValidationError as exc:
        raise InvalidInput("Invalid user data: identity is required") from exc

    log.info("Webhook received: new user signup - %s", record.identity)
    result = await asyncio.to_thread(engine.sync_user, record)
    return {
        "success": True,
        "message": f"User {record.identity} synced to nginx",
        "tempSecret": result.temp_secret,
        "role": result.role.value,
        "notified": result.notified,
        "reloaded": result.reloaded,
        "reloadError": result.reload_error,
    }


@router.post("/webhook/password-change")
async def password_change(payload: PasswordChangePayload, engine: SyncEngine = Depends(get_engine)):
    """Replace a user's temporary secret with the one they chose."""
    log.info("Webhook received: password change - %s", payload.identity)
    result = await asyncio.to_thread(
        engine.change_own_password, payload.identity, payload.old_secret, payload.new_secret
    )
    return {
        "success": True,
        "message": f"Password updated for {payload.identity}",
        "reloaded": result.reloaded,
        "reloadError": result.reload_error,
    }


@router.post("/webhook/password-reset")
async def password_reset(payload: IdentityPayload, engine: SyncEngine = Depends(get_engine)):
    """Issue a fresh temporary secret for an existing user."""
    log.info("Webhook received: password reset - %s", payload.identity)
    result = await asyncio.to_thread(engine.reset_password, payload.identity)
    return {
        "success": True,
        "message": f"Temporary password issued for {payload.identity}",
        "tempSecret": result.temp_secret,
        "notified": result.notified,
        "reloaded": result.reloaded,
        "reloadError": result.reload_error,
    }


@router.post("/webhook/user-delete")
async def user_delete(payload: IdentityPayload, engine: SyncEngine = Depends(get_engine)):
    """Remove a deleted directory user from both partitions."""
    log.info("Webhook received: user deletion - %s", payload.identity)
    result = await asyncio.to_thread(engine.remove_user, payload.identity)
    message = (
        f"User {payload.identity} removed from nginx"
        if result.found
        else f"User {payload.identity} not found"
    )
    return {
        "success": True,
        "message": message,
        "found": result.found,
        "reloaded": result.reloaded,
        "reloadError": result.reload_error,
    }
