from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

VIDEO_FORMAT = "MP4"

# field name -> options (label, prop, type, isExportVisible, ...)
ExportFieldSelection = Dict[str, Dict[str, Any]]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _BaseMedia(CamelModel):
    key: str
    gcs_uri: str
    ratio: str
    upscale_factor: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    alt_text: Optional[str] = None
    prompt: Optional[str] = None
    generation_model: Optional[str] = None
    mime_type: Optional[str] = None
    date: Optional[str] = None
    author: Optional[str] = None


class ImageMedia(_BaseMedia):
    format: Literal["PNG", "JPEG", "WEBP"]


class VideoMedia(_BaseMedia):
    format: Literal["MP4"]
    duration: Optional[float] = None


MediaItem = Annotated[Union[ImageMedia, VideoMedia], Field(discriminator="format")]


class ExportMediaForm(CamelModel):
    """Payload handed to the metadata store for one media item.

    Extra keys are kept so a manual export can carry user-entered values for
    fields that are not part of the media itself.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    media_to_export: MediaItem
    upscale_factor: str = ""
    video_thumbnail_gcs_uri: Optional[str] = None


def is_video(media: Union[ImageMedia, VideoMedia]) -> bool:
    return media.format == VIDEO_FORMAT
