from __future__ import annotations

import datetime as dt
from collections.abc import Callable, Iterable

from .utils import replace_placeholders


def archive_url_for_date(date: dt.date, url_format: str) -> str:
    parts = {
        "year": str(date.year),
        "month": f"{date.month:02d}",
    }
    return replace_placeholders(url_format, parts)


def _newest_first(posts: Iterable) -> list:
    return sorted(posts, key=lambda post: post.created, reverse=True)


def group_by_month(posts: Iterable) -> dict[dt.date, list]:
    months: dict[dt.date, list] = {}
    for post in posts:
        months.setdefault(dt.date(post.created.year, post.created.month, 1), []).append(post)
    return {month: _newest_first(items) for month, items in months.items()}


def build_archive(posts: Iterable, url_for_date: Callable[[dt.date], str]) -> dict:
    """Build the nested year/month archive for ``posts``.

    Returns ``{"posts": [...], "years": [{"date", "posts", "months": [...]}]}``
    where every month entry also carries its ``archive_url``. Years, months
    and the posts inside each group are all newest first.
    """
    posts = _newest_first(posts)

    years: dict[dt.date, list] = {}
    for post in posts:
        years.setdefault(dt.date(post.created.year, 1, 1), []).append(post)

    year_groups = []
    for year_start in sorted(years, reverse=True):
        year_posts = _newest_first(years[year_start])
        months = group_by_month(year_posts)
        month_groups = [
            {
                "date": month_start,
                "posts": months[month_start],
                "archive_url": url_for_date(month_start),
            }
            for month_start in sorted(months, reverse=True)
        ]
        year_groups.append({"date": year_start, "posts": year_posts, "months": month_groups})

    return {"posts": posts, "years": year_groups}


def stringify_keys(obj: object) -> object:
    if isinstance(obj, (list, tuple)):
        return [stringify_keys(item) for item in obj]
    if isinstance(obj, dict):
        return {str(key): stringify_keys(value) for key, value in obj.items()}
    return obj
