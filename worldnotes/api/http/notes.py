from datetime import timedelta
from typing import List, Optional
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from worldnotes.core.auth import get_principal
from worldnotes.core.config import settings
from worldnotes.core.db import get_db
from worldnotes.domains.notes import lease
from worldnotes.domains.notes.entities import NoteVersion, Principal
from worldnotes.domains.notes.locks import LockResult
from worldnotes.domains.notes.schemas import (
    LockResponse, NoteContentUpdate, NoteCreate, NoteResponse, NoteSettingsUpdate,
    VersionListResponse, VersionResponse, VersionSummaryResponse,
)
from worldnotes.domains.notes.services import NoteEditCoordinator

router = APIRouter(prefix="/campaigns/{campaign_id}/notes", tags=["notes"])


def get_coordinator(db: AsyncSession = Depends(get_db)) -> NoteEditCoordinator:
    return NoteEditCoordinator(
        db,
        ttl=timedelta(seconds=settings.lease_ttl_seconds),
        max_versions=settings.max_versions_per_note,
    )


def lock_response(result: LockResult, coordinator: NoteEditCoordinator, response: Response) -> LockResponse:
    if not result.ok:
        response.status_code = status.HTTP_409_CONFLICT
    return LockResponse(
        status=result.status.value,
        note_id=result.note_id,
        holder_id=result.holder_id,
        holder_name=result.holder_name,
        held_since=result.held_since,
        held_for_seconds=result.held_for_seconds,
        expires_at=result.expires_at,
        lease_ttl_seconds=int(coordinator.ttl.total_seconds()),
        heartbeat_interval_seconds=int(lease.heartbeat_interval_for(coordinator.ttl).total_seconds()),
    )


def version_summary(version: NoteVersion) -> VersionSummaryResponse:
    return VersionSummaryResponse(
        version_id=version.uuid,
        author_id=version.author_id,
        created_at=version.created_at,
        title_preview=version.title_preview,
    )


@router.post("/", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    note_data: NoteCreate,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    """Create a note owned by the caller"""
    note = await coordinator.create_note(
        principal,
        title=note_data.title,
        content=note_data.content,
        content_html=note_data.content_html,
        entity_id=note_data.entity_id,
        color=note_data.color,
        visibility=note_data.visibility,
    )
    return NoteResponse.model_validate(note)


@router.get("/", response_model=List[NoteResponse])
async def list_notes(
    scope: str = Query("all", pattern="^(all|campaign|entity)$"),
    entity_id: Optional[uuid.UUID] = Query(None),
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    """Own and shared notes, pinned first"""
    notes = await coordinator.list_notes(principal, scope=scope, entity_id=entity_id)
    return [NoteResponse.model_validate(note) for note in notes]


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    note = await coordinator.get_note(note_id, principal)
    return NoteResponse.model_validate(note)


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note_settings(
    note_id: uuid.UUID,
    settings_data: NoteSettingsUpdate,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    """Change color, pinned or visibility"""
    note = await coordinator.update_settings(
        note_id,
        principal,
        color=settings_data.color,
        pinned=settings_data.pinned,
        visibility=settings_data.visibility,
    )
    return NoteResponse.model_validate(note)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    await coordinator.delete_note(note_id, principal)


# Edit lock
@router.post("/{note_id}/lock", response_model=LockResponse)
async def acquire_lock(
    note_id: uuid.UUID,
    response: Response,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    result = await coordinator.acquire_lock(note_id, principal)
    return lock_response(result, coordinator, response)


@router.post("/{note_id}/heartbeat", response_model=LockResponse)
async def heartbeat(
    note_id: uuid.UUID,
    response: Response,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    result = await coordinator.heartbeat(note_id, principal)
    return lock_response(result, coordinator, response)


@router.post("/{note_id}/unlock", response_model=LockResponse)
async def release_lock(
    note_id: uuid.UUID,
    response: Response,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    result = await coordinator.release_lock(note_id, principal)
    return lock_response(result, coordinator, response)


@router.post("/{note_id}/force-unlock", response_model=LockResponse)
async def force_unlock(
    note_id: uuid.UUID,
    response: Response,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    """Break a lock held by anyone. Campaign owners only."""
    if not principal.is_elevated:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the campaign owner can force-unlock notes"
        )
    result = await coordinator.force_unlock(note_id, principal)
    return lock_response(result, coordinator, response)


# Content
@router.put("/{note_id}/content", response_model=NoteResponse)
async def update_content(
    note_id: uuid.UUID,
    update_data: NoteContentUpdate,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    """Save the note; shared notes require the caller to hold the lock"""
    note = await coordinator.update_content(
        note_id,
        principal,
        title=update_data.title,
        content=update_data.content,
        content_html=update_data.content_html,
    )
    return NoteResponse.model_validate(note)


# Versions
@router.get("/{note_id}/versions", response_model=VersionListResponse)
async def list_versions(
    note_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    versions = await coordinator.list_versions(note_id, principal)
    return VersionListResponse(
        note_id=note_id,
        versions=[version_summary(version) for version in versions],
        total=len(versions),
    )


@router.get("/{note_id}/versions/{version_id}", response_model=VersionResponse)
async def get_version(
    note_id: uuid.UUID,
    version_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    version = await coordinator.get_version(note_id, principal, version_id)
    return VersionResponse(
        version_id=version.uuid,
        note_id=version.note_id,
        author_id=version.author_id,
        title=version.title,
        content=version.content,
        content_html=version.content_html,
        created_at=version.created_at,
    )


@router.post("/{note_id}/versions/{version_id}/restore", response_model=NoteResponse)
async def restore_version(
    note_id: uuid.UUID,
    version_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    coordinator: NoteEditCoordinator = Depends(get_coordinator),
):
    """Replace the note content with a stored version; the replaced state is kept as a new version"""
    note = await coordinator.restore_version(note_id, principal, version_id)
    return NoteResponse.model_validate(note)
