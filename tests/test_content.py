from __future__ import annotations

import datetime as dt
from pathlib import Path

import pytest

from inkpress.content import Draft, Post, dump_front_matter, parse_front_matter
from inkpress.errors import ContentError
from inkpress.site import Site
from tests.conftest import post_text, write


def test_posts_are_newest_first(source: Path, site: Site) -> None:
    write(source, "_posts/2012-03-01-middle.md", post_text("Middle", "2012-03-01 09:00:00"))
    write(source, "_posts/2011-01-01-oldest.md", post_text("Oldest", "2011-01-01 09:00:00"))
    write(source, "_posts/2013-07-04-newest.md", post_text("Newest", "2013-07-04 09:00:00"))

    slugs = [post.slug for post in site.posts]

    assert slugs == ["newest", "middle", "oldest"]
    created = [post.created for post in site.posts]
    assert all(a > b for a, b in zip(created, created[1:]))


def test_post_attributes_come_from_headers_and_file_name(source: Path, site: Site) -> None:
    write(
        source,
        "_posts/2012-01-05-hello-world.md",
        "---\ntitle: Hello\ncreated: 2012-01-05 10:30:00\nupdated: 2012-02-01 08:00:00\n---\nHi.\n",
    )

    post = site.posts[0]

    assert post.slug == "hello-world"
    assert post.title == "Hello"
    assert post.url == "/hello-world"
    assert post.created == dt.datetime(2012, 1, 5, 10, 30)
    assert post.updated == dt.datetime(2012, 2, 1, 8, 0)
    assert post.content.strip() == "Hi."
    assert post.published and not post.draft


def test_post_falls_back_to_file_name_date_and_heading(source: Path, site: Site) -> None:
    write(source, "_posts/2012-06-30-plain.md", "# A heading title\n\nText.\n")

    post = site.posts[0]

    assert post.title == "A heading title"
    assert post.created == dt.datetime(2012, 6, 30)
    assert post.updated == post.created


def test_permalink_format_uses_creation_date(source: Path) -> None:
    write(source, "_config.yml", "permalink: /blog/:year/:month/:title\n")
    write(source, "_posts/2012-03-09-dated.md", post_text("Dated", "2012-03-09 12:00:00"))

    assert Site(source).posts[0].url == "/blog/2012/03/dated"


def test_explicit_slug_header_wins(source: Path, site: Site) -> None:
    write(source, "_drafts/whatever.md", "---\ntitle: T\nslug: Custom Name\n---\nx\n")

    assert site.drafts[0].slug == "custom-name"


def test_identity_is_path_or_synthetic(source: Path, site: Site) -> None:
    path = write(source, "_posts/2012-01-01-a.md", post_text("A", "2012-01-01 00:00:00"))

    first = Post.load(site, path)
    second = Post.load(site, path)
    unsaved_a = Draft(site, None, {"title": "A"})
    unsaved_b = Draft(site, None, {"title": "A"})

    assert first == second
    assert hash(first) == hash(second)
    assert unsaved_a != unsaved_b
    assert unsaved_a.key.startswith("unsaved:")


def test_autopublish_moves_draft_into_posts(source: Path, site: Site) -> None:
    draft_path = write(source, "_drafts/fresh.md", "---\ntitle: Fresh\npublish: now\n---\nNew things.\n")
    draft = site.drafts[0]
    assert draft.autopublish

    now = dt.datetime(2013, 5, 6, 7, 8, 9)
    post = draft.publish(now)

    assert not draft_path.exists()
    assert post.path.name == "2013-05-06-fresh.md"
    assert post.path.exists()
    headers, body = parse_front_matter(post.path.read_text(encoding="utf-8"))
    assert "publish" not in headers
    assert headers["created"] == "2013-05-06 07:08:09"
    assert headers["updated"] == "2013-05-06 07:08:09"
    assert body.strip() == "New things."
    assert [p.slug for p in site.posts] == ["fresh"]


def test_publish_refuses_to_overwrite_existing_post(source: Path, site: Site) -> None:
    write(source, "_posts/2013-05-06-fresh.md", post_text("Old", "2013-05-06 00:00:00"))
    write(source, "_drafts/fresh.md", "---\ntitle: Fresh\npublish: now\n---\n")

    with pytest.raises(ContentError):
        site.drafts[0].publish(dt.datetime(2013, 5, 6))


def test_draft_without_now_is_not_autopublished(source: Path, site: Site) -> None:
    write(source, "_drafts/later.md", "---\ntitle: Later\npublish: 2030-01-01 00:00:00\n---\n")

    assert not site.drafts[0].autopublish


def test_autoupdate_refreshes_updated_header(source: Path, site: Site) -> None:
    path = write(source, "_posts/2012-01-01-a.md", post_text("A", "2012-01-01 00:00:00", update="now"))
    post = site.posts[0]
    assert post.autoupdate

    post.update(dt.datetime(2014, 2, 3, 4, 5, 6))

    headers, _ = parse_front_matter(path.read_text(encoding="utf-8"))
    assert headers["updated"] == "2014-02-03 04:05:06"
    assert "update" not in headers
    assert not site.posts[0].autoupdate


def test_front_matter_round_trip_keeps_header_order() -> None:
    text = dump_front_matter({"title": "T", "created": "2012-01-01 00:00:00"}, "Body\n")

    assert text.startswith("---\ntitle: T\ncreated: 2012-01-01 00:00:00\n---\n")
    assert parse_front_matter(text) == ({"title": "T", "created": "2012-01-01 00:00:00"}, "Body")
