from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path

from .archive import archive_url_for_date, build_archive, stringify_keys
from .config import Config
from .conflicts import find_conflicts, find_conflicts_for
from .content import ContentFile, Draft, Post, all_drafts, all_posts
from .previews import PreviewAllocator

CONFIG_FILE = "_config.yml"
OUTPUT_DIR = "_site"


@dataclass(frozen=True)
class RunContext:
    """Site-wide template variables frozen for one generation run.

    Built once, after preprocessing, and handed to every render so all pages
    of a run see the same post list and archive.
    """

    posts: tuple
    latest_update_time: dt.datetime
    archive: dict
    directory: Path
    config: Config

    @classmethod
    def build(cls, site: Site, posts: list[Post] | None = None) -> RunContext:
        if posts is None:
            posts = site.posts
        return cls(
            posts=tuple(posts),
            latest_update_time=latest_update_time(posts),
            archive=stringify_keys(build_archive(posts, site.archive_url_for_date)),
            directory=site.directory,
            config=site.config,
        )

    def bindings(self) -> dict:
        return {
            "posts": list(self.posts),
            "latest_update_time": self.latest_update_time,
            "archive": self.archive,
            "directory": str(self.directory),
            "config": self.config.data,
        }


def latest_update_time(posts: list[Post]) -> dt.datetime:
    stamps = [post.updated for post in posts if post.updated is not None]
    return max(stamps) if stamps else dt.datetime.now()


class Site:
    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory).resolve()
        self._config: Config | None = None

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = Config.from_file(self.directory / CONFIG_FILE)
        return self._config

    @property
    def output_dir(self) -> Path:
        return self.directory / OUTPUT_DIR

    @property
    def posts(self) -> list[Post]:
        """All posts, newest first by creation time."""
        return sorted(all_posts(self), key=lambda post: post.created or dt.datetime.min, reverse=True)

    @property
    def drafts(self) -> list[Draft]:
        return all_drafts(self)

    @property
    def latest_update_time(self) -> dt.datetime:
        return latest_update_time(self.posts)

    def archive_url_for_date(self, date: dt.date) -> str:
        return archive_url_for_date(date, self.config.archive_url_format)

    def archives(self) -> dict:
        return build_archive(self.posts, self.archive_url_for_date)

    def private_url(self, draft: Draft) -> str | None:
        return PreviewAllocator(self.output_dir).preview_url(draft)

    def conflicts(self, content: ContentFile | None = None):
        """URL collisions across drafts and posts.

        Without an argument, returns ``{url: [items]}`` for every shared URL.
        With one, returns the items sharing its URL (itself included). Both
        return ``None`` when nothing collides.
        """
        existing = [*self.drafts, *self.posts]
        if content is not None:
            return find_conflicts_for(content, existing)
        return find_conflicts(existing)

    def template_context(self) -> RunContext:
        return RunContext.build(self)
