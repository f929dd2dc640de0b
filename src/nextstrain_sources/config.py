"""Configuration for nextstrain_sources.

Backend locations, the group table and loading of the availability
snapshot written by the ingest side.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from nextstrain_sources.core.exceptions import ConfigurationError
from nextstrain_sources.core.models import AvailabilityCache, GroupEntry


CORE_DATA_URL = "http://data.nextstrain.org/"
STAGING_DATA_URL = "http://staging.nextstrain.org/"

GITHUB_API_URL = "https://api.github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"
GITHUB_URL = "https://github.com"

NARRATIVES_REPO = "nextstrain/narratives"

# Used when a community repository's default branch can't be looked up
FALLBACK_BRANCH = "master"

GROUP_OVERVIEW_KEY = "group-overview.md"
GROUP_LOGO_KEY = "group-logo.png"

# Lifetime of presigned object storage URLs, in seconds
SIGNED_URL_EXPIRY = 900

AVAILABILITY_FILE = Path(".nextstrain-sources") / "availability.json"

GROUPS: tuple[GroupEntry, ...] = (
    # Public groups
    GroupEntry("blab"),
    GroupEntry("seattleflu"),
    GroupEntry("nextspain"),
    GroupEntry("swiss"),
    GroupEntry("cog-uk"),
    GroupEntry("ngs-sa"),
    GroupEntry("ecdc"),
    GroupEntry("illinois-gagnon-public"),
    GroupEntry("neherlab"),
    GroupEntry("spheres"),
    GroupEntry("niph"),
    GroupEntry("epicovigal"),
    GroupEntry("waphl"),
    GroupEntry("ViennaRNA", bucket="nextstrain-viennarna"),
    GroupEntry("SC2ZamPub", bucket="nextstrain-sc2zampub"),
    GroupEntry("nebraska-dhhs"),
    GroupEntry("ncovHK", bucket="nextstrain-ncovhk"),
    # Private groups
    GroupEntry("blab-private", private=True),
    GroupEntry("nz-covid19-private", private=True),
    GroupEntry("allwales-private", private=True),
    GroupEntry("illinois-gagnon-private", private=True),
    GroupEntry("grubaughlab", private=True),
    # Early adopter, hence the different bucket name
    GroupEntry("inrb-drc", private=True, bucket="nextstrain-inrb"),
    GroupEntry("ilri", private=True),
    GroupEntry("pigie", private=True),
    GroupEntry("SC2Zam", private=True, bucket="nextstrain-sc2zam"),
    GroupEntry("wallaulab", private=True),
    GroupEntry("nextflu-private", private=True),
    GroupEntry("databiomics", private=True),
)


def github_token() -> str | None:
    """GitHub API token from the environment, if one is set."""
    return os.environ.get("GITHUB_TOKEN") or None


def find_project_root(start: Path | None = None) -> Path:
    """Find the project root directory by walking up from start directory.

    Searches for marker files in the following priority order:
    1. .nextstrain-sources - Explicit project marker
    2. pyproject.toml - Python project root
    3. .git - Version control root

    Args:
        start: Directory to start searching from. If None, uses current directory.

    Returns:
        Path to project root directory. Returns start directory if no markers found.
    """
    if start is None:
        start = Path.cwd()

    markers = [".nextstrain-sources", "pyproject.toml", ".git"]
    current = start.resolve()

    for parent in [current, *current.parents]:
        for marker in markers:
            if (parent / marker).exists():
                return parent

    return start.resolve()


def load_availability(path: Path | None = None) -> AvailabilityCache:
    """Load the availability snapshot written by the ingest side.

    Args:
        path: JSON file to read. Defaults to AVAILABILITY_FILE under the
            project root.

    Returns:
        The snapshot, or an empty one if the file doesn't exist.

    Raises:
        ConfigurationError: If the file exists but isn't valid JSON.
    """
    if path is None:
        path = find_project_root() / AVAILABILITY_FILE
    if not path.exists():
        return AvailabilityCache()
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid availability file {path}: {e}") from e
    return AvailabilityCache.from_mapping(data)
