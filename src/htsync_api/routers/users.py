"""Bulk sync and user status endpoints."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends

from htsync.engine import SyncEngine
from htsync.services.directory import DirectoryPort

from htsync_api.deps import get_directory, get_engine, verify_token

router = APIRouter(tags=["users"])

log = logging.getLogger(__name__)


@router.post("/sync-all-users", dependencies=[Depends(verify_token)])
async def sync_all_users(
    engine: SyncEngine = Depends(get_engine),
    directory: DirectoryPort = Depends(get_directory),
):
    """Reconcile every directory user into the htpasswd partitions."""
    log.info("Manual sync of all users requested")
    report = await asyncio.to_thread(engine.sync_directory, directory)
    return {
        "success": True,
        "message": "Bulk sync completed",
        "stats": {"success": report.success, "errors": report.errors},
        "reloaded": report.reloaded,
        "reloadError": report.reload_error,
    }


@router.get("/user-status/{identity}", dependencies=[Depends(verify_token)])
async def user_status(identity: str, engine: SyncEngine = Depends(get_engine)):
    """Role and proxy access of a single identity, read from the partitions."""
    status = await asyncio.to_thread(engine.user_status, identity)
    return {
        "identity": status.identity,
        "role": status.role.value if status.role else None,
        "hasAccess": status.has_access,
    }
