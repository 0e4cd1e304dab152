from __future__ import annotations
"""Resolve the credentials used to reach a bucket.

Sources are tried in order and the first complete one wins:

1. ``SS3_BUCKET_<bucket>_KEY_ID`` / ``_KEY_SECRET`` (+ ``_REGION``, ``_ENDPOINT``)
2. with ``--profile``: ``SS3_PROFILE_<profile>_...`` variables, then the
   profile of the shared AWS config files (secret optionally in the OS
   keychain)
3. ``AWS_ACCESS_KEY_ID`` / ``AWS_SECRET_ACCESS_KEY`` (+ ``AWS_DEFAULT_REGION``,
   ``AWS_ENDPOINT``)

An explicit ``--region`` always overrides the resolved region.
"""
import logging
import os
from typing import Callable, Iterable, Mapping, Optional

import botocore.session
import keyring
from botocore.exceptions import BotoCoreError
from keyring.errors import KeyringError

from .bucket import DEFAULT_IGNORE_UPLOAD_NAMES, S3Bucket
from .errors import ENV_PREFIX, MissingRegionOrEndpointError, NoCredentialsFoundError
from .models import Credential, RegionProfile
from .store import ObjectStore, create_client

LOGGER = logging.getLogger(__name__)

AWS_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
AWS_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
AWS_DEFAULT_REGION = "AWS_DEFAULT_REGION"
AWS_ENDPOINT = "AWS_ENDPOINT"

KEYCHAIN_SERVICE = "ss3"

ProfileLoader = Callable[[], Mapping[str, Mapping[str, str]]]


class KeychainStore:
    """Encapsulates OS keychain access for profile secrets."""

    def __init__(self, service_name: str = KEYCHAIN_SERVICE):
        self._service_name = service_name

    def get_secret(self, profile_name: str) -> str:
        if not profile_name:
            return ""
        try:
            return keyring.get_password(self._service_name, profile_name) or ""
        except KeyringError as exc:
            LOGGER.debug("Keychain lookup failed for profile '%s': %s", profile_name, exc)
            return ""


def env_name(kind: str, name: str, part: str) -> str:
    """``env_name("BUCKET", "my-bucket", "KEY_ID")`` -> ``SS3_BUCKET_my_bucket_KEY_ID``."""

    return f"{ENV_PREFIX}_{kind}_{name.replace('-', '_')}_{part}"


def load_aws_profiles() -> Mapping[str, Mapping[str, str]]:
    """Profiles of the shared AWS config and credentials files."""

    try:
        return botocore.session.Session().full_config.get("profiles", {})
    except BotoCoreError as exc:
        LOGGER.debug("Cannot load AWS config files: %s", exc)
        return {}


class CredentialResolver:
    """Layered lookup of a :class:`Credential`."""

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        profile_loader: Optional[ProfileLoader] = None,
        keychain: Optional[KeychainStore] = None,
    ):
        self._environ = os.environ if environ is None else environ
        self._profile_loader = profile_loader or load_aws_profiles
        self._keychain = keychain or KeychainStore()

    def resolve(self, region_profile: RegionProfile, bucket: Optional[str]) -> Credential:
        credential = None
        if bucket:
            credential = self._from_env_group("BUCKET", bucket)
            if credential is not None:
                LOGGER.debug("Using bucket environment credentials for '%s'", bucket)

        if credential is None and region_profile.profile:
            credential = self._from_env_group("PROFILE", region_profile.profile)
            if credential is None:
                credential = self._from_profile_config(region_profile.profile)
            if credential is not None:
                LOGGER.debug("Using credentials of profile '%s'", region_profile.profile)

        if credential is None:
            credential = self._from_default_env()
            if credential is not None:
                LOGGER.debug("Using default AWS environment credentials")

        if credential is None:
            raise NoCredentialsFoundError(bucket)

        if region_profile.region:
            credential.region = region_profile.region
        return credential

    def _get(self, name: str) -> Optional[str]:
        value = self._environ.get(name)
        return value if value else None

    def _from_env_group(self, kind: str, name: str) -> Optional[Credential]:
        key_id = self._get(env_name(kind, name, "KEY_ID"))
        key_secret = self._get(env_name(kind, name, "KEY_SECRET"))
        if not key_id or not key_secret:
            return None
        return Credential(
            key_id=key_id,
            key_secret=key_secret,
            region=self._get(env_name(kind, name, "REGION")),
            endpoint=self._get(env_name(kind, name, "ENDPOINT")),
        )

    def _from_profile_config(self, profile: str) -> Optional[Credential]:
        config = self._profile_loader().get(profile)
        if not config:
            return None
        key_id = config.get("aws_access_key_id")
        if not key_id:
            return None
        key_secret = config.get("aws_secret_access_key") or self._keychain.get_secret(profile)
        if not key_secret:
            return None
        return Credential(
            key_id=key_id,
            key_secret=key_secret,
            region=config.get("region") or None,
            endpoint=config.get("endpoint") or config.get("endpoint_url") or None,
        )

    def _from_default_env(self) -> Optional[Credential]:
        key_id = self._get(AWS_ACCESS_KEY_ID)
        key_secret = self._get(AWS_SECRET_ACCESS_KEY)
        if not key_id or not key_secret:
            return None
        return Credential(
            key_id=key_id,
            key_secret=key_secret,
            region=self._get(AWS_DEFAULT_REGION),
            endpoint=self._get(AWS_ENDPOINT),
        )


def load_credential(
    region_profile: RegionProfile,
    bucket: Optional[str],
    resolver: Optional[CredentialResolver] = None,
) -> Credential:
    return (resolver or CredentialResolver()).resolve(region_profile, bucket)


def client_from_credential(credential: Credential, client_factory: Callable[..., object] | None = None):
    if not credential.region and not credential.endpoint:
        raise MissingRegionOrEndpointError()
    return create_client(
        access_key=credential.key_id,
        secret_key=credential.key_secret,
        region=credential.region,
        endpoint_url=credential.endpoint,
        client_factory=client_factory,
    )


def new_object_store(
    region_profile: RegionProfile,
    bucket: Optional[str] = None,
    *,
    resolver: Optional[CredentialResolver] = None,
    client_factory: Callable[..., object] | None = None,
) -> ObjectStore:
    credential = load_credential(region_profile, bucket, resolver)
    return ObjectStore(client_from_credential(credential, client_factory))


def get_bucket(
    region_profile: RegionProfile,
    bucket_name: str,
    *,
    ignore_upload_names: Iterable[str] = DEFAULT_IGNORE_UPLOAD_NAMES,
    resolver: Optional[CredentialResolver] = None,
    client_factory: Callable[..., object] | None = None,
) -> S3Bucket:
    store = new_object_store(region_profile, bucket_name, resolver=resolver, client_factory=client_factory)
    return S3Bucket(store, bucket_name, ignore_upload_names)
