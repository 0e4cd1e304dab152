from __future__ import annotations
"""Command line front end mirroring the ``aws s3`` sub-commands."""
import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence, TextIO

from .bucket import S3Bucket
from .clean import clean, plan_clean
from .console import ListingInfo, Reporter
from .credentials import CredentialResolver, get_bucket, new_object_store
from .errors import PROVIDER_ERRORS, CommandError, FilePathNotFoundError, NotSupportedError, ProviderError, Ss3Error
from .filters import GlobSet
from .models import CopyOptions, ListInfo, ListOptions, OverwriteMode, RegionProfile
from .paths import S3Url, parse_location
from .settings import AppSettings, SettingsStorage
from .transfer import Copier

LOGGER = logging.getLogger(__name__)

CT_HTML = "text/html; charset=UTF-8"
CT_TEXT = "text/plain; charset=UTF-8"
CONTENT_TYPE_ALIASES = {"html": CT_HTML, "text": CT_TEXT}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ss3",
        description="Copy, list and remove data between the local filesystem and S3-compatible storage.",
    )
    _add_connection_args(parser)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr.")
    commands = parser.add_subparsers(dest="command")

    ls = commands.add_parser("ls", help="List from s3 url (use 's3://' to list the buckets).")
    _add_connection_args(ls, suppress=True)
    ls.add_argument("path_1", help="The s3 url to list.")
    _add_filter_args(ls)
    _add_recursive_arg(ls)
    ls.add_argument(
        "--info",
        action="store_true",
        help="Display the info of the listing at the end (total files, total size, size per extension).",
    )
    ls.add_argument(
        "--info-only",
        action="store_true",
        help="Display only the info of the listing (total files, total size, size per extension).",
    )

    cp = commands.add_parser("cp", help="Copy from s3 url / file path to s3 url / file path.")
    _add_connection_args(cp, suppress=True)
    cp.add_argument("path_1", help="The source path or s3 url.")
    cp.add_argument("path_2", help="The destination path or s3 url.")
    _add_filter_args(cp)
    _add_recursive_arg(cp)
    cp.add_argument(
        "--over",
        choices=[mode.value for mode in OverwriteMode],
        default=None,
        help="Overwrite mode. Default 'skip'.",
    )
    cp.add_argument("--show-skip", action="store_true", default=None, help="Show the skipped entries.")
    cp.add_argument(
        "--noext-ct",
        default=None,
        help="Content-Type for files without extension, e.g. 'html' (alias for 'text/html; charset=UTF-8').",
    )

    rm = commands.add_parser("rm", help="Delete a S3 object by its url.")
    _add_connection_args(rm, suppress=True)
    rm.add_argument("path_1", help="The s3 url of the object to delete.")

    mb = commands.add_parser("mb", help="Create a bucket, e.g. 'ss3 mb s3://my-bucket'.")
    _add_connection_args(mb, suppress=True)
    mb.add_argument("path_1", help="The s3 url of the bucket.")

    rb = commands.add_parser("rb", help="Delete a bucket, e.g. 'ss3 rb s3://my-bucket'.")
    _add_connection_args(rb, suppress=True)
    rb.add_argument("path_1", help="The s3 url of the bucket.")

    clean_cmd = commands.add_parser(
        "clean", help="Remove the s3 objects for which the keys do not match a local file."
    )
    _add_connection_args(clean_cmd, suppress=True)
    clean_cmd.add_argument("path_1", help="The local directory.")
    clean_cmd.add_argument("path_2", help="The s3 url of the matching prefix.")
    clean_cmd.add_argument("--force", action="store_true", help="Delete without prompting.")
    return parser


def _add_connection_args(parser: argparse.ArgumentParser, suppress: bool = False) -> None:
    default = argparse.SUPPRESS if suppress else None
    parser.add_argument(
        "-p", "--profile", default=default, help="The profile to use if no bucket environment credentials."
    )
    parser.add_argument(
        "--region", default=default, help="The region to use for this command (overrides profile/env region)."
    )


def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i", "--include", action="append", help="Only process the items that match the glob expression."
    )
    parser.add_argument(
        "-e", "--exclude", action="append", help="Exclude the items that match the glob expression."
    )


def _add_recursive_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-r", "--recursive", action="store_true", help="Process all keys recursively.")


class Ss3Commands:
    """Runs parsed commands against the store."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        reporter: Reporter | None = None,
        resolver: CredentialResolver | None = None,
        client_factory: Callable[..., object] | None = None,
        prompt: Callable[[str], str] = input,
    ):
        self._settings = settings or AppSettings()
        self._reporter = reporter or Reporter()
        self._resolver = resolver
        self._client_factory = client_factory
        self._prompt = prompt

    def run(self, args: argparse.Namespace) -> None:
        handlers = {
            "ls": self.exec_ls,
            "cp": self.exec_cp,
            "rm": self.exec_rm,
            "mb": self.exec_mb,
            "rb": self.exec_rb,
            "clean": self.exec_clean,
        }
        handler = handlers.get(args.command)
        if handler is None:
            raise CommandError("a command is required (ls, cp, rm, mb, rb, clean)")
        handler(args)

    def exec_ls(self, args: argparse.Namespace) -> None:
        if args.path_1 == "s3://":
            store = new_object_store(
                _region_profile(args), None, resolver=self._resolver, client_factory=self._client_factory
            )
            self._reporter.lines(store.list_buckets())
            return

        list_info = _list_info(args)
        url = _require_s3_url(args.path_1, "The 'ls' command requires a S3 url.")
        bucket = self._bucket(args, url.bucket)
        options = ListOptions(
            recursive=args.recursive,
            includes=GlobSet.build(args.include),
            excludes=GlobSet.build(args.exclude),
        )
        show_list = list_info is not ListInfo.INFO_ONLY
        totals = ListingInfo()

        for page in bucket.list_pages(url.key, options):
            for item in page.prefixes:
                if show_list:
                    self._reporter.line(item.key)
            for item in page.objects:
                totals.add(item)
                if show_list:
                    self._reporter.line(item.key)

        if list_info is not None:
            self._reporter.lines(totals.lines())

    def exec_cp(self, args: argparse.Namespace) -> None:
        source = parse_location(args.path_1)
        destination = parse_location(args.path_2)
        options = self._copy_options(args)

        if isinstance(source, S3Url) and isinstance(destination, Path):
            bucket = self._bucket(args, source.bucket)
            self._copier(bucket).download_path(source.key, destination, options)
        elif isinstance(source, Path) and isinstance(destination, S3Url):
            if not source.exists():
                raise FilePathNotFoundError(str(source))
            bucket = self._bucket(args, destination.bucket)
            self._copier(bucket).upload_path(source, destination.key, options)
        else:
            raise NotSupportedError(f"cp from {args.path_1} to {args.path_2}")

    def exec_rm(self, args: argparse.Namespace) -> None:
        url = _require_s3_url(args.path_1, "The 'rm' command requires a S3 url.")
        if not url.key:
            raise CommandError("The 'rm' command requires an object key")
        bucket = self._bucket(args, url.bucket)
        bucket.delete_object(url.key)
        self._reporter.line(f"Object Deleted: {url}")

    def exec_mb(self, args: argparse.Namespace) -> None:
        url = _require_s3_url(args.path_1, "The 'mb' command requires a S3 url.")
        store = new_object_store(
            _region_profile(args), url.bucket, resolver=self._resolver, client_factory=self._client_factory
        )
        location = store.create_bucket(url.bucket, region=store.region)
        self._reporter.line(f"Bucket Created: {location or url.bucket}")

    def exec_rb(self, args: argparse.Namespace) -> None:
        url = _require_s3_url(args.path_1, "The 'rb' command requires a S3 url.")
        store = new_object_store(
            _region_profile(args), url.bucket, resolver=self._resolver, client_factory=self._client_factory
        )
        store.delete_bucket(url.bucket)
        self._reporter.line(f"Bucket Deleted: {url.bucket}")

    def exec_clean(self, args: argparse.Namespace) -> None:
        local_dir = parse_location(args.path_1)
        if not isinstance(local_dir, Path):
            raise CommandError("The 'clean' command requires a local directory as first argument.")
        url = _require_s3_url(args.path_2, "The 'clean' command requires a S3 url as second argument.")
        bucket = self._bucket(args, url.bucket)

        keys = plan_clean(bucket, local_dir, url.key)
        if not keys:
            self._reporter.line("Nothing to clean.")
            return
        for key in keys:
            self._reporter.line(f"{'To delete':20} {bucket.s3_url(key)}")
        if not args.force:
            answer = self._prompt(f"Delete {len(keys)} object(s)? (y/N) ").strip().lower()
            if answer not in ("y", "yes"):
                self._reporter.line("Clean cancelled.")
                return
        clean(bucket, keys, self._reporter)

    def _bucket(self, args: argparse.Namespace, name: str) -> S3Bucket:
        return get_bucket(
            _region_profile(args),
            name,
            ignore_upload_names=self._settings.ignore_upload_names,
            resolver=self._resolver,
            client_factory=self._client_factory,
        )

    def _copier(self, bucket: S3Bucket) -> Copier:
        return Copier(bucket, self._reporter, chunk_size=self._settings.download_chunk_size)

    def _copy_options(self, args: argparse.Namespace) -> CopyOptions:
        over = OverwriteMode.parse(args.over) if args.over else self._settings.default_overwrite_mode
        show_skipped = self._settings.show_skipped if args.show_skip is None else args.show_skip
        content_type = None
        if args.noext_ct:
            content_type = CONTENT_TYPE_ALIASES.get(args.noext_ct, args.noext_ct)
        return CopyOptions(
            recursive=args.recursive,
            includes=GlobSet.build(args.include),
            excludes=GlobSet.build(args.exclude),
            overwrite_mode=over,
            show_skipped=show_skipped,
            content_type_for_extensionless=content_type,
        )


def _region_profile(args: argparse.Namespace) -> RegionProfile:
    return RegionProfile(region=getattr(args, "region", None), profile=getattr(args, "profile", None))


def _list_info(args: argparse.Namespace) -> Optional[ListInfo]:
    if args.info and args.info_only:
        raise CommandError("Cannot have '--info' and '--info-only' at the same time")
    if args.info:
        return ListInfo.WITH_INFO
    if args.info_only:
        return ListInfo.INFO_ONLY
    return None


def _require_s3_url(value: str, message: str) -> S3Url:
    location = parse_location(value)
    if not isinstance(location, S3Url):
        raise CommandError(message)
    return location


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    settings_storage: SettingsStorage | None = None,
    resolver: CredentialResolver | None = None,
    client_factory: Callable[..., object] | None = None,
    prompt: Callable[[str], str] = input,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    if args.command is None:
        parser.print_help(stdout)
        return 0

    settings = (settings_storage or SettingsStorage()).load()
    commands = Ss3Commands(
        settings=settings,
        reporter=Reporter(stdout),
        resolver=resolver,
        client_factory=client_factory,
        prompt=prompt,
    )
    try:
        commands.run(args)
    except PROVIDER_ERRORS as exc:
        print(f"Error:\n  {ProviderError.from_boto(exc)}", file=stderr or sys.stderr)
        return 1
    except (Ss3Error, OSError) as exc:
        LOGGER.debug("Command '%s' failed", args.command, exc_info=True)
        print(f"Error:\n  {exc}", file=stderr or sys.stderr)
        return 1
    return 0
