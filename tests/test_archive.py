from __future__ import annotations

import datetime as dt
from pathlib import Path

from inkpress.archive import archive_url_for_date, build_archive, group_by_month, stringify_keys
from inkpress.site import Site
from tests.conftest import post_text, write


def test_archive_url_for_date_pads_month() -> None:
    assert archive_url_for_date(dt.date(2012, 3, 1), "/archive/:year/:month") == "/archive/2012/03"


def test_archive_url_replacement_is_plain_substring() -> None:
    # ":yearly" is not a placeholder but still loses its ":year" prefix.
    assert archive_url_for_date(dt.date(2012, 11, 1), "/:yearly/:month") == "/2012ly/11"


def test_site_uses_configured_format(source: Path) -> None:
    write(source, "_config.yml", "archive:\n  url_format: /posts/:month-:year\n")

    assert Site(source).archive_url_for_date(dt.date(2013, 1, 1)) == "/posts/01-2013"


def _make_posts(source: Path) -> None:
    stamps = {
        "a": "2011-12-31 23:00:00",
        "b": "2012-01-05 10:00:00",
        "c": "2012-01-20 10:00:00",
        "d": "2012-02-10 10:00:00",
        "e": "2013-06-01 10:00:00",
    }
    for slug, created in stamps.items():
        write(source, f"_posts/{created[:10]}-{slug}.md", post_text(slug.upper(), created))


def test_archive_groups_years_and_months_newest_first(source: Path, site: Site) -> None:
    _make_posts(source)

    archive = site.archives()

    assert [post.slug for post in archive["posts"]] == ["e", "d", "c", "b", "a"]
    assert [year["date"] for year in archive["years"]] == [
        dt.date(2013, 1, 1),
        dt.date(2012, 1, 1),
        dt.date(2011, 1, 1),
    ]
    year_2012 = archive["years"][1]
    assert [month["date"] for month in year_2012["months"]] == [dt.date(2012, 2, 1), dt.date(2012, 1, 1)]
    assert [post.slug for post in year_2012["months"][1]["posts"]] == ["c", "b"]
    assert year_2012["months"][0]["archive_url"] == "/archive/2012/02"


def test_year_posts_are_union_of_month_posts(source: Path, site: Site) -> None:
    _make_posts(source)

    for year in site.archives()["years"]:
        from_months = [post for month in year["months"] for post in month["posts"]]
        assert sorted(p.slug for p in from_months) == sorted(p.slug for p in year["posts"])
        created = [post.created for post in year["posts"]]
        assert created == sorted(created, reverse=True)


def test_empty_archive(site: Site) -> None:
    assert build_archive([], site.archive_url_for_date) == {"posts": [], "years": []}


def test_group_by_month_orders_posts_within_month(source: Path, site: Site) -> None:
    _make_posts(source)

    months = group_by_month(reversed(site.posts))

    assert [p.slug for p in months[dt.date(2012, 1, 1)]] == ["c", "b"]


def test_stringify_keys_recurses_through_lists() -> None:
    data = {1: [{"a": {2: "x"}}, 3], "k": "v"}

    assert stringify_keys(data) == {"1": [{"a": {"2": "x"}}, 3], "k": "v"}
