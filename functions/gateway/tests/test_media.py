import io
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from botocore.exceptions import ClientError

from gateway.config import Settings
from gateway.storage import (
    BucketMediaSink,
    LocalMediaSink,
    MediaSinkError,
    build_media_sink,
    media_folder,
    stored_name,
)


class NamingTests(unittest.TestCase):
    def test_media_folder_by_mime_type(self):
        self.assertEqual(media_folder("video/mp4"), "video")
        self.assertEqual(media_folder("image/png"), "images")
        self.assertEqual(media_folder(""), "images")
        self.assertEqual(media_folder(None), "images")

    def test_stored_name_sanitizes_base(self):
        self.assertEqual(stored_name("My Photo (1).JPG", now_ms=42), "MyPhoto1-42.JPG")

    def test_stored_name_drops_directories(self):
        self.assertEqual(stored_name("../../etc/passwd", now_ms=1), "passwd-1")
        self.assertEqual(stored_name("C:\\tmp\\clip.mp4", now_ms=1), "clip-1.mp4")

    def test_stored_name_fallback_base(self):
        self.assertEqual(stored_name("!!!.png", now_ms=7), "upload-7.png")
        self.assertEqual(stored_name("", now_ms=7), "upload-7")


class LocalMediaSinkTests(unittest.TestCase):
    def setUp(self):
        self.root = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.root, ignore_errors=True)

    def test_save_writes_under_folder(self):
        sink = LocalMediaSink(self.root)
        key = sink.save(io.BytesIO(b"abc"), "clip.mp4", "video/mp4")
        self.assertTrue(key.startswith("video/clip-"))
        self.assertEqual((self.root / key).read_bytes(), b"abc")

    def test_write_failure_is_wrapped(self):
        blocker = self.root / "images"
        blocker.write_text("not a directory")
        sink = LocalMediaSink(self.root)
        with self.assertRaises(MediaSinkError):
            sink.save(io.BytesIO(b"abc"), "a.png", "image/png")


class BucketMediaSinkTests(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("gateway.storage.boto3.client")
        self.client_factory = patcher.start()
        self.addCleanup(patcher.stop)
        self.s3 = self.client_factory.return_value

    def make_sink(self):
        return BucketMediaSink(
            bucket="media",
            region="auto",
            endpoint="https://example.r2.cloudflarestorage.com",
            access_key_id="id",
            secret_access_key="secret",
        )

    def test_upload_uses_same_key_layout(self):
        sink = self.make_sink()
        body = io.BytesIO(b"png")
        key = sink.save(body, "hero.png", "image/png")

        self.assertTrue(key.startswith("images/hero-"))
        self.s3.upload_fileobj.assert_called_once_with(
            body, "media", key, ExtraArgs={"ContentType": "image/png"}
        )

    def test_client_error_is_wrapped(self):
        self.s3.upload_fileobj.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        )
        with self.assertRaises(MediaSinkError):
            self.make_sink().save(io.BytesIO(b"x"), "a.png", "image/png")

    def test_build_media_sink_picks_bucket_when_configured(self):
        settings = Settings(media_bucket="media", media_secret_access_key="secret")
        self.assertIsInstance(build_media_sink(settings), BucketMediaSink)
        _, kwargs = self.client_factory.call_args
        self.assertEqual(kwargs["aws_secret_access_key"], "secret")

    def test_build_media_sink_defaults_to_local(self):
        self.assertIsInstance(build_media_sink(Settings(media_root="/srv/site")), LocalMediaSink)


if __name__ == "__main__":
    unittest.main()
