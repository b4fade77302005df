from __future__ import annotations

from pathlib import Path

import pytest

from inkpress.site import Site

LAYOUT = "<html><title>{{ page.title }}</title><body>{{ content }}</body></html>\n"
POST_TEMPLATE = (
    "<h1>{{ post.title }}</h1>{{ post.content | markdown }}"
    "{% if draft_preview %}[preview]{% endif %}"
    "prev={{ prev_post.slug if prev_post else '' }};next={{ next_post.slug if next_post else '' }}\n"
)
ARCHIVE_TEMPLATE = "{{ month | date('%Y-%m') }}:{% for post in posts %}{{ post.slug }},{% endfor %}\n"
CONFIG = "archive:\n  enabled: yes\n  url_format: /archive/:year/:month\n"


def write(root: Path, rel: str, text: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def post_text(title: str, created: str, **headers: str) -> str:
    lines = ["---", f"title: {title}", f"created: {created}"]
    lines.extend(f"{key}: {value}" for key, value in headers.items())
    lines.append("---")
    return "\n".join(lines) + f"\nBody of {title}.\n"


@pytest.fixture
def source(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    write(root, "_config.yml", CONFIG)
    write(root, "_layouts/default.html", LAYOUT)
    write(root, "_templates/post.html", POST_TEMPLATE)
    write(root, "_templates/archive_page.html", ARCHIVE_TEMPLATE)
    return root


@pytest.fixture
def site(source: Path) -> Site:
    return Site(source)
