import base64
import os
import shutil
import tempfile
import unittest
from io import BytesIO
from unittest import mock

from PIL import Image
from google.api_core.exceptions import Forbidden

from apps.studio.services import cloud_storage


class GcsUriTests(unittest.TestCase):
    def test_parse(self):
        self.assertEqual(cloud_storage.parse_gcs_uri("gs://b/dir/v1.mp4"), ("b", "dir/v1.mp4"))
        for bad in ("", "https://x/y", "gs://bucket", "gs://bucket/"):
            with self.assertRaises(ValueError):
                cloud_storage.parse_gcs_uri(bad)

    def test_public_url(self):
        self.assertEqual(
            cloud_storage.to_public_url("gs://b/v1.mp4"), "https://storage.googleapis.com/b/v1.mp4"
        )
        self.assertEqual(cloud_storage.to_public_url("https://x/y"), "https://x/y")


class CropTests(unittest.TestCase):
    def test_parse_ratio(self):
        self.assertAlmostEqual(cloud_storage.parse_ratio("16:9"), 16 / 9)
        for bad in ("16x9", "0:1", "", None):
            with self.assertRaises(ValueError):
                cloud_storage.parse_ratio(bad)

    def test_crop_wide_frame_to_square(self):
        img = Image.new("RGB", (1280, 720))
        self.assertEqual(cloud_storage.crop_to_ratio(img, "1:1").size, (720, 720))

    def test_crop_square_frame_to_landscape(self):
        img = Image.new("RGB", (900, 900))
        self.assertEqual(cloud_storage.crop_to_ratio(img, "16:9").size, (900, 506))


class ThumbnailTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmp, True)
        patcher = mock.patch.object(cloud_storage, "TMP_DIR", self.tmp)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _fake_download(self, uri):
        path = os.path.join(self.tmp, "video.mp4")
        with open(path, "wb") as f:
            f.write(b"not really a video")
        return path

    def test_first_frame_is_cropped_and_encoded(self):
        def fake_ffmpeg(video_path, out_path):
            Image.new("RGB", (1280, 720), "red").save(out_path)

        with mock.patch.object(cloud_storage, "download_to_tmp", side_effect=self._fake_download), \
                mock.patch.object(cloud_storage, "_extract_first_frame", side_effect=fake_ffmpeg):
            result = cloud_storage.get_video_thumbnail_base64("gs://b/v1.mp4", "9:16")

        thumb = Image.open(BytesIO(base64.b64decode(result["thumbnail_base64_data"])))
        self.assertEqual(thumb.format, "PNG")
        self.assertEqual(thumb.size, (405, 720))
        self.assertEqual(os.listdir(self.tmp), [])

    def test_ffmpeg_failure_is_reported(self):
        with mock.patch.object(cloud_storage, "download_to_tmp", side_effect=self._fake_download), \
                mock.patch.object(cloud_storage, "_extract_first_frame", side_effect=RuntimeError("ffmpeg failed")):
            result = cloud_storage.get_video_thumbnail_base64("gs://b/v1.mp4", "16:9")
        self.assertNotIn("thumbnail_base64_data", result)
        self.assertIn("ffmpeg failed", result["error"])
        self.assertEqual(os.listdir(self.tmp), [])

    def _denying_client(self):
        def create_then_fail(path):
            open(path, "wb").close()
            raise Forbidden("403 denied")

        client = mock.Mock()
        client.bucket.return_value.blob.return_value.download_to_filename.side_effect = create_then_fail
        return client

    def test_denied_download_leaves_no_file(self):
        with mock.patch.object(cloud_storage, "get_client", return_value=self._denying_client()):
            result = cloud_storage.get_video_thumbnail_base64("gs://b/v1.mp4", "16:9")
        self.assertIn("403 denied", result["error"])
        self.assertEqual(os.listdir(self.tmp), [])

    def test_download_to_tmp_reraises_after_cleanup(self):
        with mock.patch.object(cloud_storage, "get_client", return_value=self._denying_client()):
            with self.assertRaises(Forbidden):
                cloud_storage.download_to_tmp("gs://b/v1.mp4")
        self.assertEqual(os.listdir(self.tmp), [])


class UploadTests(unittest.TestCase):
    def setUp(self):
        self.client = mock.Mock()
        patcher = mock.patch.object(cloud_storage, "get_client", return_value=self.client)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_upload_returns_gs_url(self):
        data = base64.b64encode(b"png-bytes").decode()
        result = cloud_storage.upload_base64_image(data, "team", "v1_thumbnail.png", "image/png")
        self.assertEqual(result, {"success": True, "file_url": "gs://team/v1_thumbnail.png"})
        self.client.bucket.assert_called_once_with("team")
        self.client.bucket.return_value.blob.assert_called_once_with("v1_thumbnail.png")
        self.client.bucket.return_value.blob.return_value.upload_from_string.assert_called_once_with(
            b"png-bytes", content_type="image/png"
        )

    def test_upload_without_bucket_fails(self):
        result = cloud_storage.upload_base64_image("AAA", "", "x.png")
        self.assertFalse(result["success"])
        self.client.bucket.assert_not_called()

    def test_upload_error_is_reported(self):
        self.client.bucket.return_value.blob.return_value.upload_from_string.side_effect = RuntimeError("403")
        result = cloud_storage.upload_base64_image("AAAA", "team", "x.png")
        self.assertFalse(result["success"])
        self.assertIn("403", result["error"])


if __name__ == "__main__":
    unittest.main()
