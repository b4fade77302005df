from __future__ import annotations

import datetime as dt
import shutil
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Template

from .archive import group_by_month
from .cache import DigestCache
from .content import parse_front_matter
from .errors import PostConflictError
from .previews import PreviewAllocator
from .render import create_environment
from .site import RunContext, Site
from .utils import reset_dir, write_text

STAGING_DIR = Path("tmp") / "_site"
LAYOUTS_DIR = "_layouts"
TEMPLATES_DIR = "_templates"
DEFAULT_LAYOUT = "default"
NO_LAYOUT = "none"
RENDERED_SUFFIXES = {".html", ".xml"}


def bypass(path: Path) -> bool:
    return path.suffix not in RENDERED_SUFFIXES


def list_source_files(directory: Path) -> list[Path]:
    """Relative paths of every file that is not under an underscore entry."""
    files = []
    for path in directory.rglob("*"):
        rel = path.relative_to(directory)
        if rel.as_posix().startswith("_") or any(part.startswith(".") for part in rel.parts):
            continue
        if path.is_file():
            files.append(rel)
    return sorted(files, key=lambda p: p.as_posix())


@dataclass
class BuildReport:
    files: list[str] = field(default_factory=list)
    posts: list[str] = field(default_factory=list)
    previews: list[str] = field(default_factory=list)
    archives: list[str] = field(default_factory=list)
    published: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    backup: Path | None = None


class Generator:
    """Builds ``_site`` from a source tree in a staging directory.

    Runs are not guarded against each other: two generators on the same
    source directory share ``tmp/_site`` and will corrupt each other's output.
    Nothing under ``_site`` is touched until every page has rendered.
    """

    def __init__(
        self,
        site: Site,
        backup_root: Path | None = None,
        digest_cache: DigestCache | None = None,
        quiet: bool = False,
    ) -> None:
        self.site = site
        self.backup_root = Path(backup_root) if backup_root else Path(tempfile.gettempdir())
        self.env = create_environment(site.directory, digest_cache)
        self.quiet = quiet
        self._layouts: dict[str, Template] = {}

    @property
    def staging_dir(self) -> Path:
        return self.site.directory / STAGING_DIR

    def log(self, message: str) -> None:
        if not self.quiet:
            print(message)

    def load_template(self, path: Path) -> Template:
        return self.env.from_string(path.read_text(encoding="utf-8"))

    def layout(self, name: str) -> Template:
        if name not in self._layouts:
            self._layouts[name] = self.load_template(self.site.directory / LAYOUTS_DIR / f"{name}.html")
        return self._layouts[name]

    def staged(self, relative: str) -> Path:
        return self.staging_dir / relative.lstrip("/")

    def generate(self) -> BuildReport:
        report = BuildReport()
        self._layouts.clear()

        reset_dir(self.staging_dir)
        files = list_source_files(self.site.directory)
        self.layout(DEFAULT_LAYOUT)

        conflicts = self.site.conflicts()
        if conflicts:
            raise PostConflictError(conflicts)

        now = dt.datetime.now()
        self.autopublish_drafts(now, report)
        self.autoupdate_posts(now, report)

        posts = self.site.posts
        context = RunContext.build(self.site, posts)
        site_vars = context.bindings()

        for path in files:
            self.render_file(path, site_vars)
            report.files.append(path.as_posix())
        self.render_posts(posts, site_vars, report)
        self.render_draft_previews(site_vars, report)
        self.render_archives(posts, site_vars, report)

        report.backup = self.promote()
        return report

    def autopublish_drafts(self, now: dt.datetime, report: BuildReport) -> None:
        self.log("Beginning pre-process step for drafts.")
        for draft in self.site.drafts:
            if draft.autopublish:
                self.log(f"Autopublishing draft: {draft.title} / {draft.slug}")
                post = draft.publish(now)
                report.published.append(post.slug)

    def autoupdate_posts(self, now: dt.datetime, report: BuildReport) -> None:
        for post in self.site.posts:
            if post.autoupdate:
                self.log(f"Auto-updating timestamp for: {post.title} / {post.slug}")
                post.update(now)
                report.updated.append(post.slug)

    def render_file(self, path: Path, site_vars: dict) -> None:
        self.log(f"Processing file: {path.as_posix()}")
        source = self.site.directory / path
        target = self.staging_dir / path
        target.parent.mkdir(parents=True, exist_ok=True)
        if bypass(path):
            shutil.copyfile(source, target)
            return

        meta, body = parse_front_matter(source.read_text(encoding="utf-8"))
        layout_option = meta.get("layout") or DEFAULT_LAYOUT
        content = self.env.from_string(body).render(site=site_vars)
        if layout_option == NO_LAYOUT:
            write_text(target, content)
            return
        page = {"title": meta.get("title")}
        write_text(target, self.layout(layout_option).render(site=site_vars, page=page, content=content))

    def render_posts(self, posts: list, site_vars: dict, report: BuildReport) -> None:
        template = self.load_template(self.site.directory / TEMPLATES_DIR / "post.html")
        for i, post in enumerate(posts):
            # newest first, so the previous list entry is the later post
            next_post = posts[i - 1] if i > 0 else None
            prev_post = posts[i + 1] if i + 1 < len(posts) else None
            self.log(f"Processing post: {post.path}")

            layout = self.layout(post.headers.get("layout") or DEFAULT_LAYOUT)
            content = template.render(
                site=site_vars,
                post=post,
                post_page=True,
                prev_post=prev_post,
                next_post=next_post,
            )
            output = layout.render(site=site_vars, page={"title": post.title}, post_page=True, content=content)
            target = self.staged(post.url + ".html")
            write_text(target, output)
            report.posts.append(target.relative_to(self.staging_dir).as_posix())

    def render_draft_previews(self, site_vars: dict, report: BuildReport) -> None:
        template = self.load_template(self.site.directory / TEMPLATES_DIR / "post.html")
        layout = self.layout(DEFAULT_LAYOUT)
        allocator = PreviewAllocator(self.site.output_dir)
        for draft in self.site.drafts:
            relative, reused = allocator.allocate(draft)
            self.log(f"{'Updating' if reused else 'Creating'} draft preview: {relative}")
            content = template.render(site=site_vars, post=draft, draft_preview=True)
            output = layout.render(
                site=site_vars, draft_preview=True, page={"title": draft.title}, content=content
            )
            write_text(self.staged(relative + ".html"), output)
            report.previews.append(relative + ".html")

    def render_archives(self, posts: list, site_vars: dict, report: BuildReport) -> None:
        if not self.site.config.archive_enabled:
            return
        template = self.load_template(self.site.directory / TEMPLATES_DIR / "archive_page.html")
        layout = self.layout(DEFAULT_LAYOUT)
        for month, month_posts in group_by_month(posts).items():
            url = self.site.archive_url_for_date(month)
            self.log(f"Processing archive page: {url}")
            content = template.render(archive_page=True, site=site_vars, month=month, posts=month_posts)
            output = layout.render(archive_page=True, month=month, site=site_vars, content=content)
            write_text(self.staged(url + ".html"), output)
            report.archives.append(url.lstrip("/") + ".html")

    def promote(self) -> Path | None:
        """Swap the staged tree in for ``_site`` with directory moves only."""
        live = self.site.output_dir
        backup = None
        if live.exists():
            self.backup_root.mkdir(parents=True, exist_ok=True)
            backup = self.backup_root / f"_site.{dt.datetime.now():%Y-%m-%d-%H-%M-%S.%f}"
            shutil.move(str(live), str(backup))
        shutil.move(str(self.staging_dir), str(live))
        staging_parent = self.staging_dir.parent
        if staging_parent.exists() and not any(staging_parent.iterdir()):
            staging_parent.rmdir()
        return backup


def generate_site(source: Path, backup_root: Path | None = None, quiet: bool = False) -> BuildReport:
    site = Site(source)
    try:
        return Generator(site, backup_root=backup_root, quiet=quiet).generate()
    except PostConflictError as exc:
        for url, items in exc.conflicts.items():
            paths = ", ".join(str(item.path) for item in items)
            print(f"Conflict on {url}: {paths}", file=sys.stderr)
        raise
