import os
import uuid
import base64
import logging
import subprocess
from io import BytesIO
from typing import Optional, Any, Tuple

from PIL import Image
from google.cloud import storage

logger = logging.getLogger(__name__)

FFMPEG_BIN = os.getenv("FFMPEG_BIN", "ffmpeg")
TMP_DIR = os.getenv("TMP_DIR", "/tmp")

_client: Optional[Any] = None


def get_client():
    global _client
    if _client is None:
        _client = storage.Client()
    return _client


def parse_gcs_uri(uri: str) -> Tuple[str, str]:
    if not uri or not uri.startswith("gs://"):
        raise ValueError(f"not a gs:// uri: {uri!r}")
    rest = uri[len("gs://") :]
    if "/" not in rest:
        raise ValueError(f"gs:// uri has no object path: {uri!r}")
    bucket, obj = rest.split("/", 1)
    if not bucket or not obj:
        raise ValueError(f"gs:// uri has no object path: {uri!r}")
    return bucket, obj


def to_public_url(uri: str) -> str:
    try:
        bucket, obj = parse_gcs_uri(uri)
    except ValueError:
        return uri
    return f"https://storage.googleapis.com/{bucket}/{obj}"


def parse_ratio(ratio: str) -> float:
    try:
        w, h = (float(x) for x in ratio.split(":"))
    except (AttributeError, ValueError):
        raise ValueError(f"invalid aspect ratio: {ratio!r}")
    if w <= 0 or h <= 0:
        raise ValueError(f"invalid aspect ratio: {ratio!r}")
    return w / h


def crop_to_ratio(image: Image.Image, ratio: str) -> Image.Image:
    """Centre-crop ``image`` to the ``W:H`` aspect ratio."""
    target = parse_ratio(ratio)
    width, height = image.size
    if width / height > target:
        new_w = int(round(height * target))
        left = (width - new_w) // 2
        return image.crop((left, 0, left + new_w, height))
    new_h = int(round(width / target))
    top = (height - new_h) // 2
    return image.crop((0, top, width, top + new_h))


def download_to_tmp(uri: str) -> str:
    bucket_name, obj = parse_gcs_uri(uri)
    ext = os.path.splitext(obj)[1]
    local_path = os.path.join(TMP_DIR, f"{uuid.uuid4().hex}{ext}")
    blob = get_client().bucket(bucket_name).blob(obj)
    try:
        blob.download_to_filename(local_path)
    except Exception:
        # the client creates the file before the request is sent
        if os.path.exists(local_path):
            os.remove(local_path)
        raise
    return local_path


def _extract_first_frame(video_path: str, out_path: str) -> None:
    cmd = [
        FFMPEG_BIN,
        "-y",
        "-i", video_path,
        "-vframes", "1",
        "-f", "image2",
        out_path,
    ]
    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.returncode != 0:
        raise RuntimeError(f"ffmpeg failed: {result.stderr[-300:]}")


def get_video_thumbnail_base64(video_uri: str, ratio: str) -> dict:
    """Return ``{"thumbnail_base64_data": ...}`` for the first frame of a video.

    Failures are reported as ``{"error": ...}``.
    """
    video_path = None
    frame_path = os.path.join(TMP_DIR, f"{uuid.uuid4().hex}.png")
    try:
        video_path = download_to_tmp(video_uri)
        _extract_first_frame(video_path, frame_path)
        with Image.open(frame_path) as frame:
            thumb = crop_to_ratio(frame.convert("RGB"), ratio)
            buf = BytesIO()
            thumb.save(buf, format="PNG")
        return {"thumbnail_base64_data": base64.b64encode(buf.getvalue()).decode("utf-8")}
    except Exception as e:
        logger.error("Thumbnail extraction failed for %s: %s", video_uri, e)
        return {"error": f"Error while generating video thumbnail: {e}"}
    finally:
        for path in (video_path, frame_path):
            if path and os.path.exists(path):
                os.remove(path)


def upload_base64_image(
    base64_data: str, bucket_name: str, object_name: str, content_type: str = "image/png"
) -> dict:
    if not base64_data:
        return {"success": False, "error": "no image data provided"}
    if not bucket_name:
        return {"success": False, "error": "no destination bucket provided"}
    try:
        data = base64.b64decode(base64_data)
        blob = get_client().bucket(bucket_name).blob(object_name)
        blob.upload_from_string(data, content_type=content_type)
    except Exception as e:
        logger.error("Upload to gs://%s/%s failed: %s", bucket_name, object_name, e)
        return {"success": False, "error": f"Error uploading file to GCS: {e}"}
    logger.info("Uploaded to gs://%s/%s", bucket_name, object_name)
    return {"success": True, "file_url": f"gs://{bucket_name}/{object_name}"}
