"""Shared route dependencies."""

from __future__ import annotations

from fastapi import Header, HTTPException, Request

from htsync.engine import SyncEngine
from htsync.services.directory import DirectoryPort

from htsync_api.config import settings


def verify_token(authorization: str = Header("")):
    if not settings.api_token:
        return  # No token configured = open (dev mode)
    if authorization != f"Bearer {settings.api_token}":
        raise HTTPException(status_code=401, detail="Invalid webhook token")


def get_engine(request: Request) -> SyncEngine:
    return request.app.state.engine


def get_directory(request: Request) -> DirectoryPort:
    return request.app.state.directory_factory()
