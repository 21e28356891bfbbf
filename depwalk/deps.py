"""Dependency extraction.

Collects the dependency identifiers of a single manifest: the packages it
declares in ``depends`` plus the helper tools its downloads and install
scripts need.
"""

from __future__ import annotations

from .config import Config
from .helpers import HelperCheck, required_helpers
from .models import InstallerSpec, Manifest


def install_script(manifest: Manifest, architecture: str | None) -> str:
    """Concatenate pre_install, installer.script and post_install.

    Each part is picked for the given architecture first, falling back to the
    top-level property.
    """
    pre_install: list[str] = manifest.arch_specific("pre_install", architecture) or []
    installer: InstallerSpec | None = manifest.arch_specific("installer", architecture)
    post_install: list[str] = manifest.arch_specific("post_install", architecture) or []

    lines = [*pre_install, *(installer.script if installer else []), *post_install]
    return "\n".join(lines)


def installation_helpers(
    manifest: Manifest,
    architecture: str | None,
    *,
    config: Config | None = None,
    is_helper_installed: HelperCheck | None = None,
    include_installed: bool = False,
) -> list[str]:
    """Return the helper tools a manifest needs for the given architecture.

    URL-derived helpers come first, then helpers called from scripts.
    """
    urls: list[str] = manifest.arch_specific("url", architecture) or []
    from_urls = required_helpers(
        urls,
        innosetup=manifest.innosetup,
        config=config,
        is_helper_installed=is_helper_installed,
        include_installed=include_installed,
    )
    from_script = required_helpers(
        script=install_script(manifest, architecture),
        config=config,
        is_helper_installed=is_helper_installed,
        include_installed=include_installed,
    )
    return _unique([*from_urls, *from_script])


def get_dependencies(
    manifest: Manifest,
    architecture: str | None,
    *,
    config: Config | None = None,
    is_helper_installed: HelperCheck | None = None,
) -> list[str]:
    """Return every identifier that must be installed before this manifest.

    Declared ``depends`` entries are kept verbatim (they may carry a bucket
    prefix) and come first, followed by helper tools.

    Example:
        A manifest with ``depends: ["extras/vcredist"]`` and a ``.7z`` URL,
        with 7zip not installed → ["extras/vcredist", "7zip"]
    """
    helpers = installation_helpers(
        manifest,
        architecture,
        config=config,
        is_helper_installed=is_helper_installed,
    )
    return _unique([*manifest.depends, *helpers])


def _unique(items: list[str]) -> list[str]:
    """Drop duplicates, keeping the first occurrence."""
    return list(dict.fromkeys(items))
