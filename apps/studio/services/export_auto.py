"""
Best-effort persistence of freshly generated medias to the metadata collection.
For videos, a thumbnail is extracted and uploaded to the team bucket when one is configured.
"""
import logging
from typing import Optional, Sequence

from ..models.media import ExportMediaForm, ExportFieldSelection, MediaItem, is_video
from . import cloud_storage, firestore

logger = logging.getLogger(__name__)

THUMBNAIL_MIME_TYPE = "image/png"


def thumbnail_object_name(key: str) -> str:
    return f"{key}_thumbnail.png"


def _attach_video_thumbnail(form: ExportMediaForm, team_bucket: Optional[str]) -> None:
    media = form.media_to_export
    result = cloud_storage.get_video_thumbnail_base64(media.gcs_uri, media.ratio)
    data = result.get("thumbnail_base64_data")
    if not (data and team_bucket):
        return
    upload = cloud_storage.upload_base64_image(
        data, team_bucket, thumbnail_object_name(media.key), THUMBNAIL_MIME_TYPE
    )
    if upload.get("success") and upload.get("file_url"):
        form.video_thumbnail_gcs_uri = upload["file_url"]


def auto_save_media_batch(
    medias: Optional[Sequence[MediaItem]],
    export_fields: Optional[ExportFieldSelection],
    team_bucket: Optional[str] = None,
) -> None:
    """Save one metadata entry per media, one at a time.

    Never raises: a failing item is logged and the next one is processed.
    """
    if not medias or export_fields is None:
        return

    for media in medias:
        try:
            form = ExportMediaForm(
                media_to_export=media,
                upscale_factor=media.upscale_factor or "",
            )

            if is_video(media):
                try:
                    _attach_video_thumbnail(form, team_bucket)
                except Exception as e:
                    # thumbnail is optional, the entry is still saved
                    logger.warning("Auto-save thumbnail generation failed: %s", e)

            firestore.add_new_firestore_entry(media.key, form, export_fields)
        except Exception as e:
            logger.warning("Auto-save failed for media %s: %s", getattr(media, "key", None), e)
