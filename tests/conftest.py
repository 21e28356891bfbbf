"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from depwalk.graph import DependencyResolver
from depwalk.manifests import MemoryBuckets
from depwalk.models import Manifest


def manifest(version: str = "1.0.0", **fields: Any) -> Manifest:
    """Build a Manifest from keyword fields."""
    return Manifest.model_validate({"version": version, **fields})


@pytest.fixture
def source() -> MemoryBuckets:
    """A small main/extras bucket pair with a realistic dependency shape.

    app → lib, tool; lib → base; tool → base (a diamond on base).
    """
    return MemoryBuckets(
        {
            "main": {
                "app": manifest("2.0.0", depends=["lib", "tool"]),
                "lib": manifest("1.1.0", depends=["base"]),
                "tool": manifest("0.9.0", depends="base"),
                "base": manifest("3.0.0"),
                "7zip": manifest("23.01"),
                "zstd": manifest("1.5.5"),
            },
            "extras": {
                "viewer": manifest("5.0", depends=["lib", "main/zstd"]),
            },
        }
    )


@pytest.fixture
def resolver(source: MemoryBuckets) -> DependencyResolver:
    return DependencyResolver(source)


@pytest.fixture
def buckets_dir(tmp_path: Path) -> Path:
    """Bucket directories on disk, one manifest file per app."""
    files = {
        "main/bucket/git.json": {"version": "2.42.0", "url": "https://example.org/git.7z"},
        "main/bucket/7zip.json": {"version": "23.01", "url": "https://example.org/7z.msi"},
        "main/bucket/lessmsi.json": {"version": "1.10.0", "url": "https://example.org/lessmsi.zip"},
        "main/bucket/broken.json": {"description": "no version"},
        "extras/editor.json": {
            "version": "1.2",
            "depends": ["git"],
            "architecture": {
                "64bit": {"url": "https://example.org/editor-x64.zip"},
                "32bit": {"url": "https://example.org/editor-x86.tar.gz"},
            },
        },
    }
    root = tmp_path / "buckets"
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(content))
    return root
