"""Data models for depwalk.

These Pydantic models represent the manifest schema and the core data
structures passed between the resolver and the installation queue builder.
Manifests are validated once when they are loaded, so the resolver never has
to check whether a property is present.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

ARCHITECTURES = ("64bit", "32bit", "arm64")


def _as_list(value: Any) -> list[str]:
    """Wrap a bare string in a list; manifests allow both forms."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


class InstallerSpec(BaseModel):
    """The ``installer`` block of a manifest.

    Attributes:
        file: Installer executable to run, if any.
        args: Arguments passed to the installer.
        script: PowerShell lines run instead of (or around) the installer.
    """

    model_config = ConfigDict(extra="ignore")

    file: str | None = None
    args: list[str] = Field(default_factory=list)
    script: list[str] = Field(default_factory=list)

    @field_validator("args", "script", mode="before")
    @classmethod
    def _wrap(cls, value: Any) -> list[str]:
        return _as_list(value)


class ArchitectureSpec(BaseModel):
    """Per-architecture overrides inside ``architecture.<arch>``.

    Every field is optional: ``None`` means "use the top-level value".
    """

    model_config = ConfigDict(extra="ignore")

    url: list[str] | None = None
    hash: list[str] | None = None
    bin: Any = None
    extract_dir: Any = None
    pre_install: list[str] | None = None
    post_install: list[str] | None = None
    installer: InstallerSpec | None = None

    @field_validator("url", "hash", "pre_install", "post_install", mode="before")
    @classmethod
    def _wrap(cls, value: Any) -> list[str] | None:
        return None if value is None else _as_list(value)


class Manifest(BaseModel):
    """A parsed package manifest.

    Only the properties relevant to dependency resolution are modelled
    explicitly. Anything else in the JSON document is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    version: str
    description: str | None = None
    homepage: str | None = None
    license: Any = None
    depends: list[str] = Field(default_factory=list)
    url: list[str] = Field(default_factory=list)
    hash: list[str] = Field(default_factory=list)
    pre_install: list[str] = Field(default_factory=list)
    post_install: list[str] = Field(default_factory=list)
    installer: InstallerSpec | None = None
    innosetup: bool = False
    architecture: dict[str, ArchitectureSpec] = Field(default_factory=dict)

    @field_validator("depends", "url", "hash", "pre_install", "post_install", mode="before")
    @classmethod
    def _wrap(cls, value: Any) -> list[str]:
        return _as_list(value)

    def arch_specific(self, prop: str, architecture: str | None) -> Any:
        """Return the value of ``prop`` for the given architecture.

        The architecture block wins when it defines the property; otherwise
        the top-level value is returned.

        Example:
            A manifest with a top-level ``url`` and an ``architecture.64bit.url``
            returns the 64bit URL for "64bit" and the top-level URL for "32bit".
        """
        if architecture:
            variant = self.architecture.get(architecture)
            if variant is not None:
                value = getattr(variant, prop, None)
                if value is not None:
                    return value
        return getattr(self, prop, None)


class ManifestInformation(BaseModel):
    """A resolved reference to one package to be installed.

    Attributes:
        application_name: Package name, unique within one resolution pass.
        bucket: Bucket the manifest came from (or was requested from).
        manifest: Parsed manifest, or None if lookup failed.
        original_query: The identifier as the user (or a ``depends`` entry)
            wrote it, kept for error messages.
        version: Version used for conflict comparison.
        is_dependency: True when pulled in transitively. Set while merging
            the installation queue, never by the resolver.
    """

    application_name: str
    bucket: str | None = None
    manifest: Manifest | None = None
    original_query: str
    version: str | None = None
    is_dependency: bool = False


class ResolutionFailure(BaseModel):
    """A request that could not be resolved."""

    query: str
    application_name: str
    kind: str
    message: str


class VersionConflict(BaseModel):
    """A queued dependency that a later request needs in a newer version."""

    application_name: str
    queued_version: str
    newer_version: str
    required_by: str


class InstallPlan(BaseModel):
    """Result of building an installation queue.

    Attributes:
        queue: Packages in install order (dependencies first).
        failures: Requests that could not be resolved, plus any requested
            package that also turned up as a dependency of another request.
        version_conflicts: Informational notes; the queue keeps the
            first-seen entry.
    """

    queue: list[ManifestInformation] = Field(default_factory=list)
    failures: list[ResolutionFailure] = Field(default_factory=list)
    version_conflicts: list[VersionConflict] = Field(default_factory=list)

    def find(self, application_name: str) -> ManifestInformation | None:
        """Return the queued entry with this name, if any."""
        for info in self.queue:
            if info.application_name == application_name:
                return info
        return None

    @property
    def ok(self) -> bool:
        return not self.failures
