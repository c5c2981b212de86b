import os
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field

from ...security.auth import get_current_user
from ...models.media import ExportFieldSelection, ExportMediaForm, MediaItem, CamelModel
from ...services import cloud_storage, export_auto, export_fields, firestore

logger = logging.getLogger(__name__)

router = APIRouter()

TEAM_BUCKET = os.getenv("TEAM_BUCKET")


class AutoSaveRequest(CamelModel):
    medias: List[MediaItem] = Field(default_factory=list)
    export_fields: Optional[ExportFieldSelection] = None


class ExportRequest(ExportMediaForm):
    export_fields: Optional[ExportFieldSelection] = None


@router.post("/auto-save")
def auto_save(payload: AutoSaveRequest, user=Depends(get_current_user)):
    export_auto.auto_save_media_batch(payload.medias, payload.export_fields, team_bucket=TEAM_BUCKET)
    return {"ok": True, "count": len(payload.medias)}


def _configured_export_fields() -> ExportFieldSelection:
    try:
        return export_fields.load_export_fields()
    except (OSError, ValueError) as e:
        logger.error("Export fields could not be loaded: %s", e)
        raise HTTPException(status_code=500, detail="export fields are not configured correctly")


@router.get("/fields")
def get_export_fields(user=Depends(get_current_user)):
    return {"fields": _configured_export_fields()}


@router.post("")
def export_media(payload: ExportRequest, user=Depends(get_current_user)):
    fields = payload.export_fields if payload.export_fields is not None else _configured_export_fields()
    form = ExportMediaForm.model_validate(payload.model_dump(by_alias=True, exclude={"export_fields"}))
    media = form.media_to_export
    try:
        key = firestore.add_new_firestore_entry(media.key, form, fields)
    except Exception as e:
        logger.error("Export failed for media %s: %s", media.key, e)
        raise HTTPException(status_code=502, detail=f"Error while exporting media: {e}")
    return {"id": key, "asset_url": cloud_storage.to_public_url(media.gcs_uri)}


@router.get("/{key}")
def get_export(key: str, user=Depends(get_current_user)):
    doc = firestore.fetch_document_by_id(key)
    if doc is None:
        raise HTTPException(status_code=404, detail="media not found")
    return doc


@router.delete("/{key}")
def delete_export(key: str, user=Depends(get_current_user)):
    if firestore.fetch_document_by_id(key) is None:
        raise HTTPException(status_code=404, detail="media not found")
    firestore.delete_document(key)
    return {"ok": True}
