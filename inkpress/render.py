from __future__ import annotations

import datetime as dt
import os
import re
from pathlib import Path
from urllib.parse import quote_plus

import markdown
import smartypants
from jinja2 import ChainableUndefined, Environment, FileSystemLoader, TemplateSyntaxError, nodes
from jinja2.ext import Extension

from .cache import DigestCache
from .utils import parse_timestamp, xmlschema

QUOTE_PROBE = "a 'quoted' word"
QUOTE_MARKER = "&rsquo;"

# {% file_digest "file.css" [prefix:.] %}, leaving {% raw %} blocks alone
FILE_DIGEST_TAG_RE = re.compile(
    r"(?P<raw>\{%-?\s*raw\s*-?%\}(?s:.*?)\{%-?\s*endraw\s*-?%\})"
    r"|\{%(?P<lstrip>-?)\s*file_digest\b(?P<markup>.*?)(?P<rstrip>-?)%\}"
)
FILE_DIGEST_SYNTAX_RE = re.compile(r"^\s*(\S+)\s*(?:(prefix\s*:\s*\S+)\s*)?$")
PREFIX_LABEL_RE = re.compile(r"\s*prefix\s*:\s*")


def strip(value: str) -> str:
    return value.strip()


def encode_uri_component(value: str | None) -> str:
    if not value:
        return ""
    return quote_plus(value)


def smarty(text: str) -> str:
    # Escaped backticks come out as &#96; instead of opening ``quotes''.
    return smartypants.smartypants(text.replace("`", "\\`"))


def _markdown_renderer() -> markdown.Markdown:
    return markdown.Markdown(extensions=["fenced_code", "smarty"])


def render_markdown(body: str) -> str:
    renderer = _markdown_renderer()
    html = renderer.convert(body).strip()

    # Only kicks in when the renderer escapes apostrophes before the
    # typography pass runs, which leaves straight quotes in the output.
    if QUOTE_MARKER not in renderer.reset().convert(QUOTE_PROBE):
        html = html.replace("&#39;", "'")
        html = renderer.reset().convert(html)

    return html


def format_date(value: object, fmt: str = "%Y-%m-%d") -> str:
    if value == "now":
        value = dt.datetime.now()
    elif not isinstance(value, (dt.date, dt.datetime)):
        parsed = parse_timestamp(value)
        if parsed is None:
            return str(value)
        value = parsed
    return value.strftime(fmt)


class FileDigestExtension(Extension):
    """``{% file_digest "path" prefix:/cdn/ %}`` tag.

    Outputs ``prefix + md5(file)`` when ``ENV=production`` and nothing
    otherwise. The path is resolved against the site's source directory; a
    leading slash is ignored.
    """

    tags = {"file_digest"}

    def __init__(self, environment: Environment) -> None:
        super().__init__(environment)
        environment.extend(source_directory=None, digest_cache=DigestCache())

    def preprocess(self, source: str, name: str | None, filename: str | None = None) -> str:
        # The prefix argument is not a Jinja expression, so the raw markup is
        # validated here and rewritten into two string literals.
        def repl(match: re.Match) -> str:
            if match.group("raw"):
                return match.group(0)
            markup = match.group("markup")
            syntax = FILE_DIGEST_SYNTAX_RE.match(markup)
            if not syntax:
                lineno = source.count("\n", 0, match.start()) + 1
                raise TemplateSyntaxError(
                    f"Syntax error for file_digest: {markup.strip()!r}", lineno, name, filename
                )
            path = syntax.group(1).strip("\"'")
            prefix = PREFIX_LABEL_RE.sub("", syntax.group(2) or "")
            return (
                f"{{%{match.group('lstrip')} file_digest {path!r}, {prefix!r} "
                f"{match.group('rstrip')}%}}"
            )

        return FILE_DIGEST_TAG_RE.sub(repl, source)

    def parse(self, parser) -> nodes.Output:
        lineno = next(parser.stream).lineno
        path = parser.parse_expression()
        parser.stream.expect("comma")
        prefix = parser.parse_expression()
        call = self.call_method("_render_digest", [path, prefix])
        return nodes.Output([call]).set_lineno(lineno)

    def _render_digest(self, path: str, prefix: str) -> str:
        if os.environ.get("ENV") != "production":
            return ""
        directory = Path(self.environment.source_directory or ".")
        full_path = directory / path.strip().lstrip("/")
        return prefix + self.environment.digest_cache.digest(full_path)


def create_environment(source_directory: Path, digest_cache: DigestCache | None = None) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(source_directory)),
        autoescape=False,
        keep_trailing_newline=True,
        undefined=ChainableUndefined,
        extensions=[FileDigestExtension],
    )
    env.source_directory = source_directory
    if digest_cache is not None:
        env.digest_cache = digest_cache
    env.filters["strip"] = strip
    env.filters["encode_uri_component"] = encode_uri_component
    env.filters["smarty"] = smarty
    env.filters["markdown"] = render_markdown
    env.filters["xmlschema"] = xmlschema
    env.filters["date"] = format_date
    return env
