import unittest

from fakes import FakeKeychain, FakeS3Client

from ss3.credentials import (
    CredentialResolver,
    client_from_credential,
    env_name,
    get_bucket,
    new_object_store,
)
from ss3.errors import MissingRegionOrEndpointError, NoCredentialsFoundError
from ss3.models import Credential, RegionProfile


BUCKET_ENV = {
    "SS3_BUCKET_my_bucket_KEY_ID": "bucket-id",
    "SS3_BUCKET_my_bucket_KEY_SECRET": "bucket-secret",
    "SS3_BUCKET_my_bucket_REGION": "eu-west-1",
}
PROFILE_ENV = {
    "SS3_PROFILE_dev_box_KEY_ID": "profile-id",
    "SS3_PROFILE_dev_box_KEY_SECRET": "profile-secret",
    "SS3_PROFILE_dev_box_ENDPOINT": "http://localhost:9000",
}
DEFAULT_ENV = {
    "AWS_ACCESS_KEY_ID": "default-id",
    "AWS_SECRET_ACCESS_KEY": "default-secret",
    "AWS_DEFAULT_REGION": "us-east-1",
}


def make_resolver(environ=None, profiles=None, secrets=None):
    keychain = FakeKeychain(secrets)
    resolver = CredentialResolver(
        environ=dict(environ or {}),
        profile_loader=lambda: dict(profiles or {}),
        keychain=keychain,
    )
    return resolver, keychain


class EnvNameTests(unittest.TestCase):
    def test_dashes_become_underscores(self):
        self.assertEqual("SS3_BUCKET_my_bucket_KEY_ID", env_name("BUCKET", "my-bucket", "KEY_ID"))
        self.assertEqual("SS3_PROFILE_dev_box_REGION", env_name("PROFILE", "dev-box", "REGION"))


class ResolveTests(unittest.TestCase):
    def test_bucket_environment_wins(self):
        resolver, _ = make_resolver({**BUCKET_ENV, **PROFILE_ENV, **DEFAULT_ENV})

        credential = resolver.resolve(RegionProfile(profile="dev-box"), "my-bucket")

        self.assertEqual("bucket-id", credential.key_id)
        self.assertEqual("eu-west-1", credential.region)

    def test_profile_environment_before_default(self):
        resolver, _ = make_resolver({**PROFILE_ENV, **DEFAULT_ENV})

        credential = resolver.resolve(RegionProfile(profile="dev-box"), "my-bucket")

        self.assertEqual("profile-id", credential.key_id)
        self.assertEqual("http://localhost:9000", credential.endpoint)
        self.assertIsNone(credential.region)

    def test_profile_ignored_without_flag(self):
        resolver, _ = make_resolver({**PROFILE_ENV, **DEFAULT_ENV})

        credential = resolver.resolve(RegionProfile(), "my-bucket")

        self.assertEqual("default-id", credential.key_id)

    def test_profile_config_files(self):
        profiles = {
            "dev-box": {
                "aws_access_key_id": "file-id",
                "aws_secret_access_key": "file-secret",
                "region": "ap-south-1",
            }
        }
        resolver, keychain = make_resolver(DEFAULT_ENV, profiles)

        credential = resolver.resolve(RegionProfile(profile="dev-box"), "my-bucket")

        self.assertEqual("file-id", credential.key_id)
        self.assertEqual("file-secret", credential.key_secret)
        self.assertEqual("ap-south-1", credential.region)
        self.assertEqual([], keychain.get_calls)

    def test_profile_secret_from_keychain(self):
        profiles = {"dev-box": {"aws_access_key_id": "file-id", "endpoint_url": "http://minio:9000"}}
        resolver, keychain = make_resolver({}, profiles, {"dev-box": "keychain-secret"})

        credential = resolver.resolve(RegionProfile(profile="dev-box"), None)

        self.assertEqual("keychain-secret", credential.key_secret)
        self.assertEqual("http://minio:9000", credential.endpoint)
        self.assertEqual(["dev-box"], keychain.get_calls)

    def test_incomplete_profile_falls_through(self):
        profiles = {"dev-box": {"aws_access_key_id": "file-id"}}
        resolver, _ = make_resolver(DEFAULT_ENV, profiles)

        credential = resolver.resolve(RegionProfile(profile="dev-box"), None)

        self.assertEqual("default-id", credential.key_id)

    def test_empty_values_count_as_missing(self):
        resolver, _ = make_resolver(
            {"SS3_BUCKET_my_bucket_KEY_ID": "id", "SS3_BUCKET_my_bucket_KEY_SECRET": "", **DEFAULT_ENV}
        )

        credential = resolver.resolve(RegionProfile(), "my-bucket")

        self.assertEqual("default-id", credential.key_id)

    def test_explicit_region_overrides(self):
        resolver, _ = make_resolver(BUCKET_ENV)

        credential = resolver.resolve(RegionProfile(region="us-west-2"), "my-bucket")

        self.assertEqual("us-west-2", credential.region)

    def test_no_source_lists_every_location(self):
        resolver, _ = make_resolver()

        with self.assertRaises(NoCredentialsFoundError) as ctx:
            resolver.resolve(RegionProfile(profile="dev-box"), "my-bucket")

        message = str(ctx.exception)
        self.assertIn("'my-bucket'", message)
        for expected in (
            "SS3_BUCKET_bucket_name_KEY_ID",
            "SS3_PROFILE_profile_name_KEY_SECRET",
            "~/.aws/credentials",
            "AWS_ACCESS_KEY_ID",
            "AWS_ENDPOINT",
        ):
            self.assertIn(expected, message)


class ClientTests(unittest.TestCase):
    def test_requires_region_or_endpoint(self):
        with self.assertRaises(MissingRegionOrEndpointError):
            client_from_credential(Credential("id", "secret"), client_factory=lambda *a, **kw: None)

    def test_client_factory_receives_credential(self):
        calls = []

        def factory(*args, **kwargs):
            calls.append((args, kwargs))
            return FakeS3Client()

        client_from_credential(Credential("id", "secret", endpoint="http://localhost:9000"), factory)

        args, kwargs = calls[0]
        self.assertEqual(("s3",), args)
        self.assertEqual("id", kwargs["aws_access_key_id"])
        self.assertEqual("secret", kwargs["aws_secret_access_key"])
        self.assertEqual("http://localhost:9000", kwargs["endpoint_url"])
        self.assertIsNone(kwargs["region_name"])
        self.assertEqual("s3v4", kwargs["config"].signature_version)

    def test_get_bucket_wires_store(self):
        client = FakeS3Client({"a.txt": b"a"})
        resolver, _ = make_resolver(BUCKET_ENV)

        bucket = get_bucket(
            RegionProfile(),
            "my-bucket",
            ignore_upload_names=["Thumbs.db"],
            resolver=resolver,
            client_factory=lambda *a, **kw: client,
        )

        self.assertEqual("my-bucket", bucket.name)
        self.assertIs(client, bucket.store.client)
        self.assertTrue(bucket.is_ignored_name("Thumbs.db"))
        self.assertFalse(bucket.is_ignored_name(".DS_Store"))

    def test_new_object_store_without_bucket_uses_default_env(self):
        client = FakeS3Client(buckets=["one"])
        resolver, _ = make_resolver(DEFAULT_ENV)

        store = new_object_store(RegionProfile(), resolver=resolver, client_factory=lambda *a, **kw: client)

        self.assertEqual(["one"], store.list_buckets())

    def test_secret_is_hidden_from_repr(self):
        self.assertNotIn("top-secret", repr(Credential("id", "top-secret", region="us-east-1")))


if __name__ == "__main__":
    unittest.main()
