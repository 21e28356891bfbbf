"""Recursive dependency resolution.

Walks the dependency graph of one package depth-first. Each package is
pushed onto an ancestor stack while its dependencies are expanded, and
appended to the resolved list once they are all done, so the resolved list
is in install order: dependencies come before the packages that need them.

Meeting a package that is still on the ancestor stack means the chain loops
back on itself and resolution fails. Meeting a package that is already
resolved is fine (two paths to the same dependency) and it is skipped.
"""

from __future__ import annotations

import logging

from .config import Config
from .deps import get_dependencies
from .errors import CircularDependency, DependencyDepthExceeded, ManifestNotFound
from .helpers import HelperCheck
from .manifests import ManifestSource, parse_query, resolve_manifest_information
from .models import ManifestInformation

logger = logging.getLogger(__name__)

MAX_DEPTH = 256


class DependencyResolver:
    """Resolves the dependency closure of a single package.

    Args:
        source: Where manifests for dependency identifiers are looked up.
        config: Switches passed through to helper detection.
        is_helper_installed: Reports whether a helper tool is already available.
        max_depth: Longest dependency chain accepted before giving up.
    """

    def __init__(
        self,
        source: ManifestSource,
        *,
        config: Config | None = None,
        is_helper_installed: HelperCheck | None = None,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        self.source = source
        self.config = config or Config()
        self.is_helper_installed = is_helper_installed
        self.max_depth = max_depth

    def lookup(self, query: str) -> ManifestInformation:
        """Resolve a query to a ManifestInformation through the source."""
        return resolve_manifest_information(query, self.source)

    def resolve(
        self, info: ManifestInformation, architecture: str | None
    ) -> list[ManifestInformation]:
        """Return the dependencies of ``info`` in install order.

        The package itself is not part of the result, so a package without
        dependencies gives an empty list.

        Raises:
            ManifestNotFound: A package in the graph has no manifest.
            CircularDependency: A dependency chain loops back on itself.
            DependencyDepthExceeded: The chain is longer than max_depth, or
                too deep for the interpreter stack.
        """
        resolved: list[ManifestInformation] = []
        unresolved: list[str] = []
        try:
            self._visit(info, architecture, resolved, unresolved)
        except RecursionError as exc:
            # max_depth is above what the interpreter stack allows
            raise DependencyDepthExceeded(
                info.original_query, len(unresolved), unresolved
            ) from exc

        # The root is always resolved last
        if len(resolved) == 1:
            return []
        return resolved[:-1]

    def _visit(
        self,
        info: ManifestInformation,
        architecture: str | None,
        resolved: list[ManifestInformation],
        unresolved: list[str],
    ) -> None:
        if info.manifest is None:
            raise self._not_found(info)
        if len(unresolved) >= self.max_depth:
            raise DependencyDepthExceeded(
                info.original_query, self.max_depth, [*unresolved, info.application_name]
            )

        unresolved.append(info.application_name)
        deps = get_dependencies(
            info.manifest,
            architecture,
            config=self.config,
            is_helper_installed=self.is_helper_installed,
        )
        logger.debug("%s depends on %s", info.application_name, deps or "nothing")

        for dep in deps:
            name = parse_query(dep).name
            if any(r.application_name == name for r in resolved):
                continue
            if name in unresolved:
                cycle = unresolved[unresolved.index(name):] + [name]
                raise CircularDependency(dep, name, cycle)
            self._visit(self.lookup(dep), architecture, resolved, unresolved)

        resolved.append(info)
        unresolved.pop()

    def _not_found(self, info: ManifestInformation) -> ManifestNotFound:
        bucket = info.bucket
        missing = bool(bucket) and bucket not in self.source.local_buckets()
        return ManifestNotFound(info.original_query, bucket=bucket, bucket_missing=missing)
