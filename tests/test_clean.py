import io
import tempfile
import unittest
from pathlib import Path

from fakes import FakeS3Client

from ss3.bucket import S3Bucket
from ss3.clean import clean, plan_clean
from ss3.console import Reporter
from ss3.errors import FilePathNotFoundError
from ss3.store import ObjectStore


class CleanTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.local = Path(self._tmp.name) / "site"
        self.local.mkdir()
        (self.local / "a.txt").write_bytes(b"a")
        (self.local / "b.txt").write_bytes(b"b")
        self.client = FakeS3Client(
            {
                "p/a.txt": b"a",
                "p/b.txt": b"b",
                "p/stale.txt": b"old",
                "q/other.txt": b"keep",
            }
        )
        self.bucket = S3Bucket(ObjectStore(self.client), "bucket-one")

    def test_plan_lists_remote_keys_without_local_file(self):
        self.assertEqual(["p/stale.txt"], plan_clean(self.bucket, self.local, "p/"))

    def test_plan_covers_nested_files(self):
        (self.local / "sub").mkdir()
        (self.local / "sub" / "c.txt").write_bytes(b"c")
        self.client.objects.update({"p/sub/c.txt": b"c", "p/sub/gone.txt": b"g"})

        self.assertEqual(["p/stale.txt", "p/sub/gone.txt"], plan_clean(self.bucket, self.local, "p/"))

    def test_ignored_local_names_do_not_protect_remote_keys(self):
        (self.local / ".DS_Store").write_bytes(b"meta")
        self.client.objects["p/.DS_Store"] = b"meta"

        self.assertIn("p/.DS_Store", plan_clean(self.bucket, self.local, "p/"))

    def test_sibling_prefixes_are_not_planned(self):
        self.client.objects.update({"p2/keep.txt": b"k", "p.bak": b"k"})

        self.assertEqual(["p/stale.txt"], plan_clean(self.bucket, self.local, "p"))
        self.assertEqual("p/", self.client.list_objects_kwargs[0]["Prefix"])

    def test_plan_requires_local_directory(self):
        with self.assertRaises(FilePathNotFoundError):
            plan_clean(self.bucket, self.local / "a.txt", "p/")

    def test_plan_considers_first_page_only(self):
        client = FakeS3Client({"p/a.txt": b"a", "p/b.txt": b"b", "p/x.txt": b"x", "p/y.txt": b"y"}, page_size=3)
        bucket = S3Bucket(ObjectStore(client), "bucket-one")

        self.assertEqual(["p/x.txt"], plan_clean(bucket, self.local, "p/"))
        self.assertEqual(1, len(client.list_objects_kwargs))

    def test_clean_deletes_and_reports(self):
        output = io.StringIO()

        deleted = clean(self.bucket, ["p/stale.txt"], Reporter(output))

        self.assertEqual(1, deleted)
        self.assertEqual(["p/stale.txt"], self.client.delete_object_calls)
        self.assertNotIn("p/stale.txt", self.client.objects)
        self.assertIn("s3://bucket-one/p/stale.txt", output.getvalue())


if __name__ == "__main__":
    unittest.main()
