"""Endpoints controlling the synchronization session."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from dashboard_sync.application.use_cases import SyncSession
from dashboard_sync.interfaces.api.dependencies import get_sync_session
from dashboard_sync.interfaces.api.schemas import (
    EmitResult,
    PasswordResetCreate,
    ReconcileResult,
    SupportRequestCreate,
    SyncStatusRead,
)

router = APIRouter(tags=["sync"])


@router.get("/sync/status", response_model=SyncStatusRead)
def read_sync_status(session: SyncSession = Depends(get_sync_session)) -> SyncStatusRead:
    return SyncStatusRead.model_validate(session.status())


@router.post("/sync/reconcile", response_model=ReconcileResult)
async def reconcile_now(session: SyncSession = Depends(get_sync_session)) -> ReconcileResult:
    """Poll the activity log immediately instead of waiting for the next cycle."""

    return ReconcileResult(emitted=await session.reconcile_now())


@router.post(
    "/support-requests", response_model=EmitResult, status_code=status.HTTP_202_ACCEPTED
)
async def create_support_request(
    payload: SupportRequestCreate,
    session: SyncSession = Depends(get_sync_session),
) -> EmitResult:
    sent = await session.emit_support_request(payload.email, payload.issue_type, payload.message)
    return EmitResult(sent=sent)


@router.post(
    "/password-resets", response_model=EmitResult, status_code=status.HTTP_202_ACCEPTED
)
async def create_password_reset(
    payload: PasswordResetCreate,
    session: SyncSession = Depends(get_sync_session),
) -> EmitResult:
    sent = await session.emit_password_reset(
        payload.branch_admin_email, payload.temporary_password, payload.user_name
    )
    return EmitResult(sent=sent)


__all__ = ["router"]
