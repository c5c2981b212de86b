import os
import logging
from typing import Optional, Any, Dict

from google.cloud import firestore

from ..models.media import ExportMediaForm, ExportFieldSelection

logger = logging.getLogger(__name__)

PROJECT_ID = os.getenv("PROJECT_ID")
FIRESTORE_DATABASE_ID = os.getenv("FIRESTORE_DATABASE_ID", "(default)")
METADATA_COLLECTION = os.getenv("METADATA_COLLECTION", "metadata")

_client: Optional[Any] = None


def get_client():
    global _client
    if _client is None:
        _client = firestore.Client(project=PROJECT_ID, database=FIRESTORE_DATABASE_ID)
    return _client


def _is_empty(value) -> bool:
    return value is None or (isinstance(value, (list, tuple)) and len(value) == 0)


def build_document(form: ExportMediaForm, export_fields: ExportFieldSelection) -> Dict[str, Any]:
    """Flatten an export form into the metadata document.

    Each selected field is read off the media item (through its ``prop`` option
    when the document name differs from the media attribute) and otherwise off
    the form itself.
    """
    media = form.media_to_export.model_dump(by_alias=True)
    form_values = form.model_dump(by_alias=True, exclude={"media_to_export"})

    doc: Dict[str, Any] = {
        "id": form.media_to_export.key,
        "gcsURI": form.media_to_export.gcs_uri,
        "format": form.media_to_export.format,
    }
    for field, options in (export_fields or {}).items():
        prop = (options.get("prop") if isinstance(options, dict) else None) or field
        value = media.get(prop)
        if _is_empty(value):
            value = form_values.get(field)
        if _is_empty(value):
            continue
        doc[field] = value

    if form.video_thumbnail_gcs_uri:
        doc["videoThumbnailGcsUri"] = form.video_thumbnail_gcs_uri
    return doc


def add_new_firestore_entry(
    key: str, form: ExportMediaForm, export_fields: ExportFieldSelection
) -> str:
    doc = build_document(form, export_fields)
    doc["timestamp"] = firestore.SERVER_TIMESTAMP
    get_client().collection(METADATA_COLLECTION).document(key).set(doc, merge=True)
    logger.info("Saved metadata for %s to %s", key, METADATA_COLLECTION)
    return key


def fetch_document_by_id(key: str) -> Optional[Dict[str, Any]]:
    snap = get_client().collection(METADATA_COLLECTION).document(key).get()
    if not snap.exists:
        return None
    return snap.to_dict()


def delete_document(key: str) -> None:
    get_client().collection(METADATA_COLLECTION).document(key).delete()
