import hashlib
import tempfile
import unittest
from pathlib import Path

from fakes import FakeS3Client

from ss3.bucket import S3Bucket
from ss3.errors import FileExistsOverFailError, NotSupportedError, ObjectExistsError
from ss3.models import OverwriteMode
from ss3.overwrite import (
    SItemsCache,
    compute_md5,
    has_same_etag,
    validate_over_for_file_dest,
    validate_over_for_s3_dest,
)
from ss3.store import ObjectStore


class OverwriteTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name)
        self.local = self.tmp / "a.txt"
        self.local.write_bytes(b"hello")
        self.client = FakeS3Client({"p/a.txt": b"hello", "p/b.txt": b"other"})
        self.bucket = S3Bucket(ObjectStore(self.client), "bucket-one")


class S3DestinationTests(OverwriteTestCase):
    def test_write_always_proceeds(self):
        self.assertTrue(validate_over_for_s3_dest(self.bucket, "p/a.txt", self.local, OverwriteMode.WRITE))
        self.assertEqual([], self.client.head_object_calls)

    def test_skip_proceeds_only_when_missing(self):
        self.assertFalse(validate_over_for_s3_dest(self.bucket, "p/a.txt", self.local, OverwriteMode.SKIP))
        self.assertTrue(validate_over_for_s3_dest(self.bucket, "p/new.txt", self.local, OverwriteMode.SKIP))

    def test_fail_raises_when_exists(self):
        with self.assertRaises(ObjectExistsError) as ctx:
            validate_over_for_s3_dest(self.bucket, "p/a.txt", self.local, OverwriteMode.FAIL)

        self.assertIn("s3://bucket-one/p/a.txt", str(ctx.exception))

    def test_fail_proceeds_on_fresh_destination(self):
        self.assertTrue(validate_over_for_s3_dest(self.bucket, "p/new.txt", self.local, OverwriteMode.FAIL))

    def test_etag_skips_identical_content(self):
        self.assertFalse(validate_over_for_s3_dest(self.bucket, "p/a.txt", self.local, OverwriteMode.ETAG))
        self.assertTrue(validate_over_for_s3_dest(self.bucket, "p/b.txt", self.local, OverwriteMode.ETAG))
        self.assertTrue(validate_over_for_s3_dest(self.bucket, "p/new.txt", self.local, OverwriteMode.ETAG))


class EtagTests(OverwriteTestCase):
    def test_compute_md5_matches_hashlib(self):
        self.assertEqual(hashlib.md5(b"hello").hexdigest(), compute_md5(self.local))

    def test_cache_avoids_live_lookups(self):
        cache = SItemsCache.load(self.bucket, "p/")
        calls_after_load = len(self.client.list_objects_kwargs)

        self.assertEqual({"p/a.txt", "p/b.txt"}, set(cache))
        self.assertTrue(has_same_etag(self.bucket, "p/a.txt", self.local, cache))
        self.assertFalse(has_same_etag(self.bucket, "p/missing.txt", self.local, cache))
        self.assertEqual(calls_after_load, len(self.client.list_objects_kwargs))

    def test_without_cache_uses_single_lookup(self):
        self.assertTrue(has_same_etag(self.bucket, "p/a.txt", self.local))

        self.assertEqual(1, len(self.client.list_objects_kwargs))
        self.assertEqual(1, self.client.list_objects_kwargs[0]["MaxKeys"])

    def test_unreadable_file_is_not_identical(self):
        self.assertFalse(has_same_etag(self.bucket, "p/a.txt", self.tmp / "missing.txt"))


class FileDestinationTests(OverwriteTestCase):
    def test_modes(self):
        missing = self.tmp / "missing.txt"

        self.assertTrue(validate_over_for_file_dest(self.local, OverwriteMode.WRITE))
        self.assertFalse(validate_over_for_file_dest(self.local, OverwriteMode.SKIP))
        self.assertTrue(validate_over_for_file_dest(missing, OverwriteMode.SKIP))
        self.assertTrue(validate_over_for_file_dest(missing, OverwriteMode.FAIL))
        with self.assertRaises(FileExistsOverFailError):
            validate_over_for_file_dest(self.local, OverwriteMode.FAIL)

    def test_etag_not_supported_for_downloads(self):
        with self.assertRaises(NotSupportedError):
            validate_over_for_file_dest(self.local, OverwriteMode.ETAG)


class OverwriteModeTests(unittest.TestCase):
    def test_parse_and_labels(self):
        self.assertIs(OverwriteMode.SKIP, OverwriteMode.parse(None))
        self.assertIs(OverwriteMode.ETAG, OverwriteMode.parse("ETag"))
        self.assertEqual("Exists", OverwriteMode.SKIP.label)
        with self.assertRaises(ValueError):
            OverwriteMode.parse("sometimes")


if __name__ == "__main__":
    unittest.main()
