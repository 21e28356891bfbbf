"""Manifest lookup.

Turns application queries such as ``extras/firefox@120.0`` into
ManifestInformation objects. Manifests come from a ManifestSource: either a
set of pre-loaded manifests held in memory, or bucket directories on disk
containing one ``<app>.json`` file per application.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from .errors import ManifestError
from .models import Manifest, ManifestInformation

logger = logging.getLogger(__name__)

_QUERY = re.compile(r"^(?:(?P<bucket>[\w.-]+)/)?(?P<name>[\w.-]+)(?:@(?P<version>.+))?$")


@dataclass(frozen=True)
class AppQuery:
    """A parsed ``[bucket/]name[@version]`` query."""

    name: str
    bucket: str | None = None
    version: str | None = None


def parse_query(query: str) -> AppQuery:
    """Split an application query into bucket, name and version.

    Names are lowercased; bucket and version are kept as written. Strings
    that do not look like a query are returned whole as the name so the
    lookup fails with a useful message.

    Examples:
        "git" → AppQuery(name="git")
        "extras/Firefox@120.0" → AppQuery(name="firefox", bucket="extras", version="120.0")
    """
    query = query.strip()
    match = _QUERY.match(query)
    if not match:
        return AppQuery(name=query.lower())
    return AppQuery(
        name=match["name"].lower(),
        bucket=match["bucket"],
        version=match["version"],
    )


def load_manifest(path: Path) -> Manifest:
    """Load and validate a manifest JSON file.

    Raises:
        ManifestError: If the file is unreadable, not JSON, or fails validation.
    """
    try:
        return Manifest.model_validate_json(path.read_bytes())
    except OSError as exc:
        raise ManifestError(f"Cannot read manifest {path}: {exc}") from exc
    except ValidationError as exc:
        raise ManifestError(f"Invalid manifest {path}: {exc}") from exc


class ManifestSource(Protocol):
    """What the resolver needs from wherever manifests are stored."""

    def find_manifest(
        self, name: str, bucket: str | None = None, version: str | None = None
    ) -> tuple[Manifest, str] | None:
        """Return the manifest and the bucket it was found in, or None."""
        ...

    def local_buckets(self) -> set[str]:
        """Return the names of the buckets available locally."""
        ...


def _version_matches(manifest: Manifest, version: str | None) -> bool:
    return version is None or manifest.version == version


class MemoryBuckets:
    """Manifests that were loaded up front, keyed by bucket then app name.

    Buckets are searched in insertion order when a query names no bucket.
    """

    def __init__(self, buckets: dict[str, dict[str, Manifest]] | None = None) -> None:
        self._buckets: dict[str, dict[str, Manifest]] = {}
        for bucket, manifests in (buckets or {}).items():
            self._buckets.setdefault(bucket, {})
            for name, manifest in manifests.items():
                self.add(bucket, name, manifest)

    def add(self, bucket: str, name: str, manifest: Manifest) -> None:
        self._buckets.setdefault(bucket, {})[name.lower()] = manifest

    def find_manifest(
        self, name: str, bucket: str | None = None, version: str | None = None
    ) -> tuple[Manifest, str] | None:
        names = [bucket] if bucket else list(self._buckets)
        for bucket_name in names:
            manifest = self._buckets.get(bucket_name, {}).get(name.lower())
            if manifest is not None and _version_matches(manifest, version):
                return manifest, bucket_name
        return None

    def local_buckets(self) -> set[str]:
        return set(self._buckets)


class LocalBuckets:
    """Bucket directories on disk.

    Each bucket is a directory holding ``<app>.json`` manifests, either
    directly or in a ``bucket/`` subdirectory.

    Args:
        buckets: Map of bucket name → directory, in search order.
    """

    def __init__(self, buckets: dict[str, Path]) -> None:
        self.buckets = dict(buckets)

    @classmethod
    def from_root(cls, root: Path) -> LocalBuckets:
        """Treat every subdirectory of root as a bucket, sorted by name."""
        if not root.is_dir():
            return cls({})
        return cls({p.name: p for p in sorted(root.iterdir()) if p.is_dir()})

    def _manifest_path(self, bucket_dir: Path, name: str) -> Path | None:
        for candidate in (bucket_dir / "bucket" / f"{name}.json", bucket_dir / f"{name}.json"):
            if candidate.is_file():
                return candidate
        return None

    def find_manifest(
        self, name: str, bucket: str | None = None, version: str | None = None
    ) -> tuple[Manifest, str] | None:
        names = [bucket] if bucket else list(self.buckets)
        for bucket_name in names:
            bucket_dir = self.buckets.get(bucket_name)
            if bucket_dir is None:
                continue
            path = self._manifest_path(bucket_dir, name)
            if path is None:
                continue
            try:
                manifest = load_manifest(path)
            except ManifestError as exc:
                logger.warning("%s", exc)
                continue
            if _version_matches(manifest, version):
                return manifest, bucket_name
            logger.debug(
                "%s/%s is at version %s, not %s", bucket_name, name, manifest.version, version
            )
        return None

    def local_buckets(self) -> set[str]:
        return set(self.buckets)


def resolve_manifest_information(query: str, source: ManifestSource) -> ManifestInformation:
    """Look up a query and wrap the result in a ManifestInformation.

    A failed lookup is not an error here: the returned object simply has no
    manifest, and the resolver reports it when it reaches that node.
    """
    parsed = parse_query(query)
    found = source.find_manifest(parsed.name, parsed.bucket, parsed.version)
    if found is None:
        return ManifestInformation(
            application_name=parsed.name,
            bucket=parsed.bucket,
            original_query=query,
            version=parsed.version,
        )
    manifest, bucket = found
    return ManifestInformation(
        application_name=parsed.name,
        bucket=bucket,
        manifest=manifest,
        original_query=query,
        version=manifest.version,
    )
