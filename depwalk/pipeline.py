"""Installation queue: resolve → merge → order.

This module builds the global install plan for a batch of requested
packages:
1. Resolve each request's dependency closure with a DependencyResolver
2. Merge the closures into one queue, keeping one entry per package
3. Append each request after the dependencies it introduced

A request that cannot be resolved is reported and skipped; the rest of the
batch still resolves.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from .errors import DependencyResolvesToSelf, ResolutionError
from .graph import DependencyResolver
from .models import InstallPlan, ManifestInformation, ResolutionFailure, VersionConflict
from .versions import is_newer

logger = logging.getLogger(__name__)


def _record_failure(plan: InstallPlan, app: ManifestInformation, exc: ResolutionError) -> None:
    logger.error("%s", exc)
    plan.failures.append(
        ResolutionFailure(
            query=app.original_query,
            application_name=app.application_name,
            kind=type(exc).__name__,
            message=str(exc),
        )
    )


def _merge_dependency(
    plan: InstallPlan,
    dep: ManifestInformation,
    required_by: ManifestInformation,
    is_app_installed: Callable[[str], bool] | None,
) -> None:
    """Add one dependency to the queue, or note a version conflict."""
    existing = plan.find(dep.application_name)
    if existing is None:
        if is_app_installed is not None and is_app_installed(dep.application_name):
            logger.debug("%s is already installed, skipping", dep.application_name)
            return
        dep.is_dependency = True
        plan.queue.append(dep)
        return

    # The first-seen entry stays queued; a newer candidate is only reported
    if is_newer(dep.version, existing.version):
        logger.info(
            "%s requires %s %s, but %s is already queued",
            required_by.application_name,
            dep.application_name,
            dep.version,
            existing.version,
        )
        plan.version_conflicts.append(
            VersionConflict(
                application_name=dep.application_name,
                queued_version=existing.version or "",
                newer_version=dep.version or "",
                required_by=required_by.application_name,
            )
        )


def build_installation_queue(
    requested: Iterable[ManifestInformation],
    architecture: str | None,
    resolver: DependencyResolver,
    *,
    is_app_installed: Callable[[str], bool] | None = None,
) -> InstallPlan:
    """Build one install queue for a batch of requested packages.

    Args:
        requested: Distinct packages the user asked for, in order.
        architecture: Target architecture ("64bit", "32bit", "arm64").
        resolver: Resolves each request's dependency closure.
        is_app_installed: Optional check; dependencies it reports as
            installed are left out of the queue. Requests are never pruned.

    Returns:
        InstallPlan whose queue lists dependencies before their dependents,
        in first-introduction order across the batch. Requests that failed
        are listed in ``failures`` instead.

    Example:
        Requests [a, b] where a needs c and b needs c and d:
        queue → [c, a, d, b], with c and d marked is_dependency.
    """
    plan = InstallPlan()

    for app in requested:
        try:
            deps = resolver.resolve(app, architecture)
        except ResolutionError as exc:
            _record_failure(plan, app, exc)
            continue

        for dep in deps:
            _merge_dependency(plan, dep, app, is_app_installed)

        if plan.find(app.application_name) is None:
            plan.queue.append(app)
        else:
            _record_failure(
                plan, app, DependencyResolvesToSelf(app.original_query, app.application_name)
            )

    return plan


def plan_installation(
    queries: Iterable[str],
    architecture: str | None,
    resolver: DependencyResolver,
    *,
    is_app_installed: Callable[[str], bool] | None = None,
) -> InstallPlan:
    """Look up queries and build their installation queue.

    Repeated queries for the same application are collapsed, keeping the
    first one.
    """
    requested: dict[str, ManifestInformation] = {}
    for query in queries:
        info = resolver.lookup(query)
        requested.setdefault(info.application_name, info)
    return build_installation_queue(
        requested.values(), architecture, resolver, is_app_installed=is_app_installed
    )
