import os
import json
import logging
from functools import lru_cache

from ..models.media import ExportFieldSelection

logger = logging.getLogger(__name__)

EXPORT_FIELDS_OPTIONS_PATH = os.getenv("EXPORT_FIELDS_OPTIONS_PATH")

DEFAULT_EXPORT_FIELDS: ExportFieldSelection = {
    "id": {"label": "Media ID", "type": "text-info", "prop": "key", "isExportVisible": False, "isUpdatable": False},
    "gcsURI": {"label": "Media location", "type": "text-info", "prop": "gcsUri", "isExportVisible": False, "isUpdatable": False},
    "format": {"label": "Format", "type": "text-info", "isExportVisible": True, "isUpdatable": False},
    "aspectRatio": {"label": "Aspect ratio", "type": "text-info", "prop": "ratio", "isExportVisible": True, "isUpdatable": False},
    "width": {"label": "Width", "type": "text-info", "isExportVisible": True, "isUpdatable": False},
    "height": {"label": "Height", "type": "text-info", "isExportVisible": True, "isUpdatable": False},
    "duration": {"label": "Duration (s)", "type": "text-info", "isExportVisible": True, "isUpdatable": False},
    "prompt": {"label": "Prompt", "type": "text-info", "isExportVisible": True, "isUpdatable": False},
    "generationModel": {"label": "Model", "type": "text-info", "isExportVisible": True, "isUpdatable": False},
    "author": {"label": "Author", "type": "text-info", "isExportVisible": True, "isUpdatable": False},
    "creationDate": {"label": "Creation date", "type": "text-info", "prop": "date", "isExportVisible": True, "isUpdatable": False},
    "upscaleFactor": {"label": "Upscale factor", "type": "text-info", "isExportVisible": True, "isUpdatable": False},
    "videoThumbnailGcsUri": {"label": "Video thumbnail", "type": "text-info", "isExportVisible": False, "isUpdatable": False},
    "isPublic": {"label": "Public", "type": "radio-button", "isExportVisible": True, "isUpdatable": True},
}


@lru_cache(maxsize=1)
def load_export_fields() -> ExportFieldSelection:
    """Export field options from ``EXPORT_FIELDS_OPTIONS_PATH``, else the defaults."""
    if not EXPORT_FIELDS_OPTIONS_PATH:
        return DEFAULT_EXPORT_FIELDS
    with open(EXPORT_FIELDS_OPTIONS_PATH, "r", encoding="utf-8") as f:
        fields = json.load(f)
    if not isinstance(fields, dict):
        raise ValueError(f"{EXPORT_FIELDS_OPTIONS_PATH}: expected a JSON object of field options")
    logger.info("Loaded %d export fields from %s", len(fields), EXPORT_FIELDS_OPTIONS_PATH)
    return fields
