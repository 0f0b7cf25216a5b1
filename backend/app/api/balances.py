# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from app.api.deps import AdminDep, AuthDep
from app.db import SessionDep
from app.schemas.balance import BalanceResponse, SettingsResponse, UpdateSettingsPayload
from app.services import balance as balance_service

balance_router = APIRouter(prefix="/toil/balance", tags=["balances"])

settings_router = APIRouter(prefix="/users/{user_id}/toil-settings", tags=["balances"])


@balance_router.get("", response_model=BalanceResponse)
async def get_balance(
    session: SessionDep,
    auth: AuthDep,
) -> BalanceResponse:
    """Get the caller's TOIL balance snapshot."""
    return await balance_service.get_balance(session, auth.user_id)


@settings_router.get("", response_model=SettingsResponse)
async def get_settings(
    user_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> SettingsResponse:
    """Get a user's effective TOIL limits."""
    return await balance_service.get_user_settings(session, auth, user_id)


@settings_router.put("", response_model=SettingsResponse)
async def update_settings(
    user_id: uuid.UUID,
    payload: UpdateSettingsPayload,
    session: SessionDep,
    auth: AdminDep,
) -> SettingsResponse:
    """Set a user's TOIL limits (admin only)."""
    return await balance_service.update_user_settings(session, auth, user_id, payload)
