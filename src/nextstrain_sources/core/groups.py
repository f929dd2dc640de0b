"""Nextstrain groups: datasets and narratives kept in S3 buckets.

Every group is one bucket. Public groups are read over plain HTTPS;
private groups hand out presigned URLs and are only visible to members.
Concrete group sources are generated from the ``config.GROUPS`` table by
``make_group_source``.
"""

from __future__ import annotations

import gzip
import logging
import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, ClassVar

import frontmatter

from nextstrain_sources import config
from nextstrain_sources.core.exceptions import BackendError, OverviewError
from nextstrain_sources.core.models import SourceInfo
from nextstrain_sources.core.path_utils import (
    datasets_from_filenames,
    narratives_from_filenames,
)
from nextstrain_sources.core.sources import Source


if TYPE_CHECKING:
    from nextstrain_sources.core.models import GroupEntry, Principal


logger = logging.getLogger(__name__)

DEFAULT_BYLINE = "The available datasets and narratives in this group are listed below."


@dataclass(frozen=True, slots=True)
class GroupOverview:
    """Fields parsed from a group's overview document."""

    title: str
    byline: str | None = None
    website: str | None = None
    show_datasets: bool = True
    show_narratives: bool = True
    content: str = ""


def _optional_bool(metadata: dict[str, Any], field: str) -> bool:
    value = metadata.get(field)
    if value is None:
        return True
    if not isinstance(value, bool):
        raise OverviewError(f"The `{field}` field in the frontmatter must be a boolean.")
    return value


def parse_overview_markdown(markdown: str) -> GroupOverview:
    """Parse a group overview: YAML front matter followed by markdown.

    Args:
        markdown: Full text of the overview document.

    Returns:
        The parsed overview, with ``showDatasets``/``showNarratives``
        defaulting to true.

    Raises:
        OverviewError: If ``title`` is missing, ``website`` isn't an http(s)
            URL, or a show flag isn't a boolean.
    """
    post = frontmatter.loads(markdown)
    metadata = dict(post.metadata)

    title = metadata.get("title")
    if not title:
        raise OverviewError("The overview file requires `title` in the frontmatter.")

    website = metadata.get("website")
    if website and "http" not in str(website):
        raise OverviewError('The website field in the overview file requires "http" to be present.')

    return GroupOverview(
        title=str(title),
        byline=metadata.get("byline"),
        website=website or None,
        show_datasets=_optional_bool(metadata, "showDatasets"),
        show_narratives=_optional_bool(metadata, "showNarratives"),
        # Files with CRLF endings (Windows)
        content=post.content.replace("\r\n", "\n"),
    )


class S3Source(Source):
    """Shared logic for sources backed by a single bucket."""

    bucket: ClassVar[str]

    async def base_url(self) -> str:
        return f"https://{self.bucket}.s3.amazonaws.com"

    async def _list_keys(self) -> list[str]:
        return await self.backends.objects.list_keys(self.bucket)

    async def available_datasets(self) -> list[str]:
        try:
            keys = await self._list_keys()
        except BackendError as e:
            logger.warning("Could not list S3 objects for group %r: %s", self.name, e)
            return []
        return datasets_from_filenames(keys)

    async def available_narratives(self) -> list[str]:
        try:
            keys = await self._list_keys()
        except BackendError as e:
            logger.warning("Could not list S3 objects for group %r: %s", self.name, e)
            return []
        return narratives_from_filenames(keys, exclude=(config.GROUP_OVERVIEW_KEY,))

    async def get_and_decompress_object(self, key: str) -> bytes:
        """Read an object, undoing gzip content encoding."""
        stored = await self.backends.objects.get_object(self.bucket, key)
        if stored.content_encoding == "gzip":
            return gzip.decompress(stored.body)
        return stored.body

    def _fallback_info(self, error: str | None = None) -> SourceInfo:
        return SourceInfo(
            title=f'"{self.name}" Nextstrain group',
            byline=DEFAULT_BYLINE,
            website=None,
            show_datasets=True,
            show_narratives=True,
            error=error,
        )

    async def get_info(self) -> SourceInfo:
        """Describe the group, customised by optional overview and logo objects.

        Never raises: any failure yields the default description with
        ``error`` set.
        """
        try:
            keys = set(await self._list_keys())

            avatar = None
            if config.GROUP_LOGO_KEY in keys:
                # Signed so clients can fetch it from private buckets too
                avatar = await self.backends.objects.presign(
                    "get_object", self.bucket, config.GROUP_LOGO_KEY
                )

            if config.GROUP_OVERVIEW_KEY not in keys:
                return replace(self._fallback_info(), avatar=avatar)

            raw = await self.get_and_decompress_object(config.GROUP_OVERVIEW_KEY)
            overview = parse_overview_markdown(raw.decode("utf-8"))
            return SourceInfo(
                title=overview.title,
                byline=overview.byline,
                website=overview.website,
                show_datasets=overview.show_datasets,
                show_narratives=overview.show_narratives,
                avatar=avatar,
                overview=overview.content,
            )
        except Exception as e:  # noqa: BLE001
            logger.warning("Error in custom group info for %r: %s", self.name, e)
            return self._fallback_info(error=f"Error in custom group info: {e}")


class PublicGroupSource(S3Source):
    """A group readable by anyone."""

    @classmethod
    def is_group(cls) -> bool:
        return True


class PrivateS3Source(S3Source):
    """A bucket-backed source needing signed URLs.

    Subclasses must define ``source_visible_to_user`` themselves; inheriting
    this class's rule is rejected when the subclass is defined.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.source_visible_to_user.__func__ is PrivateS3Source.source_visible_to_user.__func__:
            raise TypeError(
                f"{cls.__name__}.source_visible_to_user() must be implemented explicitly "
                "(not inherited from PrivateS3Source)"
            )

    @classmethod
    def source_visible_to_user(cls, principal: Principal | None) -> bool:
        raise NotImplementedError(
            "source_visible_to_user() must be implemented by PrivateS3Source subclasses"
        )

    async def url_for(self, key: str, method: str = "GET") -> str:
        operation = "head_object" if method == "HEAD" else "get_object"
        return await self.backends.objects.presign(operation, self.bucket, key)


class PrivateGroupSource(PrivateS3Source):
    """A group visible only to its members."""

    @classmethod
    def source_visible_to_user(cls, principal: Principal | None) -> bool:
        return principal is not None and cls.name in (principal.groups or ())

    @classmethod
    def is_group(cls) -> bool:
        return True


def _class_name(group_name: str) -> str:
    words = re.split(r"[^0-9A-Za-z]+", group_name)
    return "".join(word[:1].upper() + word[1:] for word in words if word) + "Source"


def make_group_source(entry: GroupEntry) -> type[S3Source]:
    """Create the source class for one row of the group table.

    Example:
        >>> cls = make_group_source(GroupEntry("inrb-drc", private=True, bucket="nextstrain-inrb"))
        >>> cls.__name__, cls.name, cls.bucket
        ('InrbDrcSource', 'inrb-drc', 'nextstrain-inrb')
    """
    base = PrivateGroupSource if entry.private else PublicGroupSource
    return type(
        _class_name(entry.name),
        (base,),
        {
            "__module__": __name__,
            "__doc__": f"Nextstrain group {entry.name!r}.",
            "name": entry.name,
            "bucket": entry.bucket_name,
        },
    )
