from __future__ import annotations

import argparse
import subprocess
import sys
import time
from pathlib import Path

from jinja2 import TemplateError

from .errors import InkpressError
from .generate import generate_site
from .site import OUTPUT_DIR
from .skeleton import produce_skeleton


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="inkpress", description="Static blog generator.")
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("help", help="Show this help message.")
    commands.add_parser("admin", help="Start the admin interface.")

    dev = commands.add_parser("dev", help="Serve the generated site locally.")
    dev.add_argument("-s", "--source", default=".", help="Site source directory.")
    dev.add_argument("-p", "--port", default=8000, type=int, help="Port to listen on.")

    new = commands.add_parser("new", help="Create a skeleton project.")
    new.add_argument("directory", nargs="?", default=".", help="Directory to create the project in.")

    generate = commands.add_parser("generate", help="Generate the site into _site.")
    generate.add_argument("-s", "--source", default=".", help="Site source directory.")
    generate.add_argument("-q", "--quiet", action="store_true", help="Only report errors.")
    return parser


def print_help(parser: argparse.ArgumentParser) -> int:
    parser.print_help()
    return 0


def initialize_admin_server(args: argparse.Namespace) -> int:
    print("The admin interface is not bundled with inkpress.", file=sys.stderr)
    return 1


def initialize_dev_server(args: argparse.Namespace) -> int:
    site_dir = Path(args.source) / OUTPUT_DIR
    if not site_dir.exists():
        print(f"Output directory {site_dir} does not exist, run generate first.", file=sys.stderr)
        return 1
    print(f"Serving {site_dir} on http://localhost:{args.port}/ (Ctrl+C to stop)")
    try:
        result = subprocess.run(
            [sys.executable, "-m", "http.server", str(args.port), "--directory", str(site_dir)],
            check=False,
        )
    except KeyboardInterrupt:
        print("\nServer stopped.")
        return 0
    return result.returncode


def new_project(args: argparse.Namespace) -> int:
    target = Path(args.directory)
    for path in produce_skeleton(target):
        print(f"Created {path}")
    return 0


def generate(args: argparse.Namespace) -> int:
    start = time.perf_counter()
    generate_site(Path(args.source), quiet=args.quiet)
    elapsed = time.perf_counter() - start
    print(f"Site generated in {elapsed:.2f}s.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handlers = {
        "admin": initialize_admin_server,
        "dev": initialize_dev_server,
        "new": new_project,
        "generate": generate,
    }
    handler = handlers.get(args.command)
    if handler is None:
        return print_help(parser)
    try:
        return handler(args)
    except (InkpressError, TemplateError, OSError, UnicodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
