"""Exceptions raised while resolving dependencies.

Every error that ends the resolution of one request derives from
ResolutionError, so the installation queue builder can catch them in one
place and carry on with the rest of the batch.
"""

from __future__ import annotations


class ResolutionError(Exception):
    """Base class for errors that stop the resolution of one request."""

    def __init__(self, message: str, query: str) -> None:
        super().__init__(message)
        self.query = query


class ManifestNotFound(ResolutionError):
    """A query could not be resolved to a manifest.

    Attributes:
        query: The original query string.
        bucket: Bucket named in the query, if any.
        bucket_missing: True when that bucket is not added locally.
    """

    def __init__(
        self, query: str, bucket: str | None = None, bucket_missing: bool = False
    ) -> None:
        message = f"Couldn't find manifest for '{query}'"
        message += f" from '{bucket}' bucket." if bucket else "."
        if bucket and bucket_missing:
            message += f" Bucket '{bucket}' is not added; add it and try again."
        super().__init__(message, query)
        self.bucket = bucket
        self.bucket_missing = bucket_missing


class CircularDependency(ResolutionError):
    """A dependency chain revisits a package that is still being expanded.

    Attributes:
        dependency: Name of the package that closed the cycle.
        path: Package names along the cycle, first and last being equal.
    """

    def __init__(self, query: str, dependency: str, path: list[str]) -> None:
        super().__init__(
            f"Circular dependency detected: {' -> '.join(path)}.", query
        )
        self.dependency = dependency
        self.path = path


class DependencyDepthExceeded(ResolutionError):
    """The dependency chain is deeper than the resolver allows."""

    def __init__(self, query: str, depth: int, path: list[str]) -> None:
        super().__init__(
            f"Dependency chain of '{query}' exceeds the maximum depth of {depth}"
            f" (at {' -> '.join(path[-3:])}).",
            query,
        )
        self.depth = depth
        self.path = path


class DependencyResolvesToSelf(ResolutionError):
    """A requested package was also queued as a dependency of another request."""

    def __init__(self, query: str, application_name: str) -> None:
        super().__init__(
            f"'{application_name}' was requested but is already queued as a"
            " dependency of an earlier request.",
            query,
        )
        self.application_name = application_name


class ManifestError(Exception):
    """A manifest file is not valid JSON or does not match the schema."""


class ConfigError(Exception):
    """The configuration file could not be read or parsed."""
