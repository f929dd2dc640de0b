"""Filename <-> path conventions shared by listing backends.

Backends store datasets as flat files such as
``flu_seasonal_h3n2_ha_2y_tip-frequencies.json``; listings turn those
into logical paths like ``flu/seasonal/h3n2/ha/2y``.
"""

from __future__ import annotations

from collections.abc import Iterable


# Sidecars that never stand for a dataset on their own
_SKIPPED_SIDECARS = ("_tip-frequencies", "_root-sequence", "_seq")

# Legacy two-file datasets are listed via either half
_LEGACY_HALVES = ("_meta", "_tree")


def filename_to_path(stem: str) -> str:
    """Convert an underscore-joined stem into a slash-joined path."""
    return "/".join(stem.split("_"))


def datasets_from_filenames(filenames: Iterable[str]) -> list[str]:
    """Derive dataset paths from a flat list of file names or keys.

    Only ``.json`` files count. Sidecar files are dropped and the two halves
    of a legacy meta/tree dataset collapse onto a single path.

    Args:
        filenames: File names or object keys.

    Returns:
        Unique dataset paths in first-seen order.

    Example:
        >>> datasets_from_filenames(["zika.json", "zika_tip-frequencies.json"])
        ['zika']
    """
    paths: dict[str, None] = {}
    for filename in filenames:
        if not filename.endswith(".json"):
            continue
        stem = filename[: -len(".json")]
        if stem.endswith(_SKIPPED_SIDECARS):
            continue
        for half in _LEGACY_HALVES:
            if stem.endswith(half):
                stem = stem[: -len(half)]
                break
        if stem:
            paths.setdefault(filename_to_path(stem), None)
    return list(paths)


def narratives_from_filenames(
    filenames: Iterable[str], exclude: Iterable[str] = ()
) -> list[str]:
    """Derive narrative paths from markdown file names.

    Args:
        filenames: File names or object keys.
        exclude: Exact names that are not narratives (overviews, READMEs).

    Returns:
        Narrative paths in listing order.
    """
    excluded = set(exclude)
    return [
        filename_to_path(name[: -len(".md")])
        for name in filenames
        if name.endswith(".md") and name not in excluded
    ]


def strip_repo_prefix(path: str, repo_name: str) -> str:
    """Remove a leading repository name segment from a listed path.

    Community files are named ``{repo}_{rest}``; the repository name is
    re-added by the resource itself, so listings report only ``rest``.
    The collection root dataset (``{repo}.json``) maps to "".
    """
    prefix = filename_to_path(repo_name)
    if path == prefix:
        return ""
    if path.startswith(f"{prefix}/"):
        return path[len(prefix) + 1 :]
    return path
