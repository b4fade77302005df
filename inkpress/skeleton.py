from __future__ import annotations

import datetime as dt
from pathlib import Path

from .errors import InkpressError
from .utils import format_timestamp, write_text

CONFIG_YML = """\
permalink: /:title
archive:
  enabled: yes
  url_format: /archive/:year/:month
"""

DEFAULT_LAYOUT = """\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{% if page and page.title %}{{ page.title }} - {% endif %}My site</title>
  <link rel="stylesheet" href="/css/style.css?{% file_digest "css/style.css" %}">
</head>
<body>
{{ content }}
</body>
</html>
"""

POST_TEMPLATE = """\
<article>
  <h1>{{ post.title | smarty }}</h1>
  {% if draft_preview %}<p class="draft-notice">Draft preview</p>{% endif %}
  {% if post.created %}<time datetime="{{ post.created | xmlschema }}">{{ post.created | date("%d %B %Y") }}</time>{% endif %}
  {{ post.content | markdown }}
  {% if prev_post %}<a class="prev" href="{{ prev_post.url }}">{{ prev_post.title }}</a>{% endif %}
  {% if next_post %}<a class="next" href="{{ next_post.url }}">{{ next_post.title }}</a>{% endif %}
</article>
"""

ARCHIVE_TEMPLATE = """\
<h1>Posts from {{ month | date("%B %Y") }}</h1>
<ul>
{% for post in posts %}  <li><a href="{{ post.url }}">{{ post.title }}</a></li>
{% endfor %}</ul>
"""

INDEX_HTML = """\
---
title: Home
---
<ul>
{% for post in site.posts %}  <li><a href="{{ post.url }}">{{ post.title }}</a></li>
{% endfor %}</ul>
"""

STYLE_CSS = """\
body { font-family: Georgia, serif; max-width: 40em; margin: 0 auto; }
"""

SAMPLE_POST = """\
---
title: Sample post
created: {created}
---
Welcome. This is a post written in *Markdown*.
"""

SAMPLE_DRAFT = """\
---
title: Sample draft
---
Drafts get a private preview link when the site is generated.
"""


def skeleton_files(now: dt.datetime | None = None) -> dict[str, str]:
    now = now or dt.datetime.now()
    return {
        "_config.yml": CONFIG_YML,
        "_layouts/default.html": DEFAULT_LAYOUT,
        "_templates/post.html": POST_TEMPLATE,
        "_templates/archive_page.html": ARCHIVE_TEMPLATE,
        "index.html": INDEX_HTML,
        "css/style.css": STYLE_CSS,
        f"_posts/{now:%Y-%m-%d}-sample-post.md": SAMPLE_POST.format(created=format_timestamp(now)),
        "_drafts/sample-draft.md": SAMPLE_DRAFT,
    }


def produce_skeleton(target: Path, now: dt.datetime | None = None) -> list[Path]:
    if target.exists() and any(target.iterdir()):
        raise InkpressError(f"Refusing to create a project in non-empty directory: {target}")
    created = []
    for rel, text in skeleton_files(now).items():
        path = target / rel
        write_text(path, text)
        created.append(path)
    return created
