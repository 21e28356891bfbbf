"""Installation helper detection.

Some packages can only be extracted or installed with an external helper
tool: 7-Zip for most archive formats, lessmsi for MSI packages, innounp or
innoextract for Inno Setup installers, zstd for Zstandard archives and WiX
dark for WiX bundles. This module decides which helpers a package needs by
looking at its download URLs and at the text of its install scripts.

Detection is purely textual. A script that mentions ``Expand-7zipArchive``
needs 7zip whether or not that line would actually run.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from .config import Config

SEVENZIP = "7zip"
LESSMSI = "lessmsi"
INNOUNP = "innounp"
INNOEXTRACT = "innoextract"
ZSTD = "zstd"
DARK = "dark"

# Output order of required_helpers()
HELPERS = (SEVENZIP, LESSMSI, INNOUNP, INNOEXTRACT, ZSTD, DARK)

_SEVENZIP_URL = re.compile(
    r"\.((gz)|(tar)|(t[abgpx]z)|(lzma)|(bz)|(7z)|(001)|(rar)|(iso)|(xz)|(lzh)|(nupkg))(\.[^\d.]+)?$",
    re.IGNORECASE,
)
_MSI_URL = re.compile(r"\.msi$", re.IGNORECASE)
_ZSTD_URL = re.compile(r"\.zst$", re.IGNORECASE)

_EXPAND_CALL = re.compile(r"Expand-\w+Archive", re.IGNORECASE)
_SEVENZIP_CALL = re.compile(r"Expand-7zipArchive\b", re.IGNORECASE)
_MSI_CALL = re.compile(r"Expand-MsiArchive\b", re.IGNORECASE)
_INNO_CALL = re.compile(r"Expand-InnoArchive\b", re.IGNORECASE)
_INNOEXTRACT_FLAG = re.compile(r"Expand-InnoArchive\b[^\n]*-UseInnoextract\b", re.IGNORECASE)
_ZSTD_CALL = re.compile(r"Expand-ZstdArchive\b", re.IGNORECASE)
_DARK_CALL = re.compile(r"Expand-DarkArchive\b", re.IGNORECASE)

HelperCheck = Callable[[str], bool]


def _never_installed(helper: str) -> bool:
    return False


def _url_file_name(url: str) -> str:
    """Return the part of a URL that names the downloaded file.

    A ``#/name.ext`` fragment renames the download, so it wins over the path.
    Query strings are dropped.
    """
    if "#/" in url:
        return url.rsplit("#/", 1)[1]
    return url.split("#", 1)[0].split("?", 1)[0]


def url_helpers(urls: Iterable[str]) -> set[str]:
    """Return the helpers implied by download formats, ignoring config."""
    found: set[str] = set()
    for url in urls:
        name = _url_file_name(url)
        if _SEVENZIP_URL.search(name):
            found.add(SEVENZIP)
        if _MSI_URL.search(name):
            found.add(LESSMSI)
        if _ZSTD_URL.search(name):
            found.add(ZSTD)
    return found


def script_helpers(script: str, config: Config) -> set[str]:
    """Return the helpers called from install script text, ignoring installs."""
    # Nothing to find without at least one Expand-*Archive call
    if not script or not _EXPAND_CALL.search(script):
        return set()

    found: set[str] = set()
    if _SEVENZIP_CALL.search(script):
        found.add(SEVENZIP)
    if _MSI_CALL.search(script):
        found.add(LESSMSI)
    if _INNO_CALL.search(script):
        if config.get("innosetup_use_innoextract") or _INNOEXTRACT_FLAG.search(script):
            found.add(INNOEXTRACT)
        else:
            found.add(INNOUNP)
    if _ZSTD_CALL.search(script):
        found.add(ZSTD)
    if _DARK_CALL.search(script):
        found.add(DARK)
    return found


def required_helpers(
    urls: Iterable[str] = (),
    script: str = "",
    *,
    innosetup: bool = False,
    config: Config | None = None,
    is_helper_installed: HelperCheck | None = None,
    include_installed: bool = False,
) -> list[str]:
    """Return the helpers that must be installed before a package.

    Args:
        urls: Download URLs of the package (already architecture-specific).
        script: Concatenated install script text.
        innosetup: The manifest's ``innosetup`` flag.
        config: Configuration switches; defaults apply when omitted.
        is_helper_installed: Reports whether a helper is already available.
        include_installed: Report helpers even when they are installed.

    Returns:
        Helper names without duplicates, in a fixed order.

    Example:
        required_helpers(["https://example.org/app.7z"]) → ["7zip"]
    """
    config = config or Config()
    installed = is_helper_installed or _never_installed

    found = url_helpers(urls) | script_helpers(script, config)
    if innosetup:
        found.add(INNOEXTRACT if config.get("innosetup_use_innoextract") else INNOUNP)

    if not include_installed:
        found = {helper for helper in found if not installed(helper)}

    # zstd archives are usually tarballs, unpacked by 7zip afterwards
    if ZSTD in found and (include_installed or not installed(SEVENZIP)):
        found.add(SEVENZIP)

    if config.get("use_external_7zip"):
        found.discard(SEVENZIP)

    return [helper for helper in HELPERS if helper in found]
