from __future__ import annotations

import datetime as dt
import itertools
import re
from pathlib import Path

from .errors import ContentError
from .utils import format_timestamp, parse_timestamp, replace_placeholders

POSTS_DIR = "_posts"
DRAFTS_DIR = "_drafts"
POST_NAME_RE = re.compile(r"^(?P<date>\d{4}-\d{2}-\d{2})-(?P<slug>.+)$")

_synthetic_keys = itertools.count(1)


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"[^\w]+", "-", text, flags=re.UNICODE)
    text = text.strip("-_").replace("_", "-")
    return text or "post"


def parse_front_matter(text: str) -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end = i
            break
    if end is None:
        return {}, clean_text

    meta = {}
    for line in lines[1:end]:
        line = line.strip()
        if not line or line.startswith("#") or ":" not in line:
            continue
        key, value = line.split(":", 1)
        meta[key.strip().lower()] = value.strip()
    body = "\n".join(lines[end + 1 :])
    return meta, body


def dump_front_matter(meta: dict, body: str) -> str:
    lines = ["---"]
    lines.extend(f"{key}: {value}" for key, value in meta.items())
    lines.append("---")
    return "\n".join(lines) + "\n" + body.rstrip("\n") + "\n"


def extract_title(meta: dict, body: str) -> str:
    if meta.get("title"):
        return meta["title"]
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("# "):
            return stripped[2:].strip() or "Untitled"
        if stripped:
            break
    return "Untitled"


class ContentFile:
    """A post or draft backed by a text file with a front-matter header.

    ``path`` may be ``None`` for content that has not been saved yet; such
    items get a synthetic identity key so they never compare equal to a file
    on disk.
    """

    type = "content"

    def __init__(self, site, path: Path | None = None, headers: dict | None = None, body: str = "", slug: str = "") -> None:
        self.site = site
        self.path = path
        self.headers = dict(headers or {})
        self.body = body
        self._slug = slug
        self._synthetic_key = f"unsaved:{next(_synthetic_keys)}"

    @classmethod
    def load(cls, site, path: Path) -> ContentFile:
        headers, body = parse_front_matter(path.read_text(encoding="utf-8"))
        return cls(site, path, headers, body)

    @property
    def key(self) -> str:
        if self.path is not None:
            return str(Path(self.path).resolve())
        return self._synthetic_key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentFile):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.slug!r} {self.url!r}>"

    @property
    def basename(self) -> str:
        return self.path.name if self.path is not None else self.slug

    def _name_slug(self) -> str:
        if self.path is None:
            return ""
        return self.path.stem

    @property
    def slug(self) -> str:
        explicit = (self.headers.get("slug") or "").strip()
        if explicit:
            return slugify(explicit)
        if self._slug:
            return self._slug
        return slugify(self._name_slug() or self.title)

    @property
    def title(self) -> str:
        return extract_title(self.headers, self.body)

    @property
    def content(self) -> str:
        return self.body

    @property
    def draft(self) -> bool:
        return False

    @property
    def published(self) -> bool:
        return not self.draft

    @property
    def created(self) -> dt.datetime | None:
        return parse_timestamp(self.headers.get("created"))

    @property
    def updated(self) -> dt.datetime | None:
        return parse_timestamp(self.headers.get("updated")) or self.created

    def _url_time(self) -> dt.datetime:
        return self.created or dt.datetime.now()

    @property
    def url(self) -> str:
        when = self._url_time()
        parts = {
            "year": f"{when.year:04d}",
            "month": f"{when.month:02d}",
            "day": f"{when.day:02d}",
            "title": self.slug,
        }
        return replace_placeholders(self.site.config.permalink, parts)

    def save(self) -> None:
        if self.path is None:
            raise ContentError(f"Cannot save {self.slug!r} without a path.")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(dump_front_matter(self.headers, self.body), encoding="utf-8")


class Post(ContentFile):
    type = "post"

    def _name_match(self) -> re.Match | None:
        if self.path is None:
            return None
        return POST_NAME_RE.match(self.path.stem)

    def _name_slug(self) -> str:
        match = self._name_match()
        if match:
            return match.group("slug")
        return super()._name_slug()

    @property
    def created(self) -> dt.datetime | None:
        created = super().created
        if created is not None:
            return created
        match = self._name_match()
        if match:
            try:
                return dt.datetime.fromisoformat(match.group("date"))
            except ValueError:
                pass
        if self.path is not None and self.path.exists():
            return dt.datetime.fromtimestamp(self.path.stat().st_mtime)
        return None

    @property
    def autoupdate(self) -> bool:
        return (self.headers.get("update") or "").strip() == "now"

    def update(self, now: dt.datetime | None = None) -> None:
        now = now or dt.datetime.now()
        self.headers.pop("update", None)
        self.headers["updated"] = format_timestamp(now)
        self.save()


class Draft(ContentFile):
    type = "draft"

    @property
    def draft(self) -> bool:
        return True

    def _url_time(self) -> dt.datetime:
        return dt.datetime.now()

    @property
    def autopublish(self) -> bool:
        return (self.headers.get("publish") or "").strip() == "now"

    def publish(self, now: dt.datetime | None = None) -> Post:
        if self.path is None:
            raise ContentError(f"Cannot publish unsaved draft {self.slug!r}.")
        now = now or dt.datetime.now()
        target = self.site.directory / POSTS_DIR / f"{now:%Y-%m-%d}-{self.slug}{self.path.suffix}"
        if target.exists():
            raise ContentError(f"Cannot publish {self.slug!r}: {target} already exists.")
        headers = {key: value for key, value in self.headers.items() if key != "publish"}
        headers["created"] = format_timestamp(now)
        headers["updated"] = format_timestamp(now)
        post = Post(self.site, target, headers, self.body)
        post.save()
        self.path.unlink()
        return post


def _content_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(path for path in directory.iterdir() if path.is_file() and not path.name.startswith("."))


def all_posts(site) -> list[Post]:
    return [Post.load(site, path) for path in _content_files(site.directory / POSTS_DIR)]


def all_drafts(site) -> list[Draft]:
    return [Draft.load(site, path) for path in _content_files(site.directory / DRAFTS_DIR)]
