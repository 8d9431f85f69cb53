from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .bundler import Bundler
from .config import MinifyOptions
from .errors import LuaminError
from .sources import FileSystemSource


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="luamin",
        description="A Lua minifier that also outputs a source map",
    )
    parser.add_argument("files", nargs="+", type=Path, help="Lua entry files to minify")
    parser.add_argument(
        "--module-like",
        "-m",
        action="store_true",
        help="Bundle required modules behind a generated require() loader",
    )
    parser.add_argument(
        "--include",
        "-I",
        action="append",
        default=[],
        metavar="MODULE",
        help="Extra module to bundle in module-like mode (repeatable)",
    )
    parser.add_argument("--no-map-comment", action="store_true", help="Do not append the sourceMappingURL comment")
    parser.add_argument("--no-sources-content", action="store_true", help="Leave original sources out of the map")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--version", action="version", version=f"luamin {__version__}")
    return parser.parse_args(argv)


def output_paths(path: Path) -> tuple[Path, Path]:
    minified = path.with_name(f"{path.stem}.min{path.suffix}")
    source_map = path.with_name(f"{path.name}.map")
    return minified, source_map


def process_file(path: Path, ns: argparse.Namespace) -> None:
    path = path.resolve()
    minified_path, map_path = output_paths(path)
    options = MinifyOptions(
        module_like=ns.module_like,
        extension=path.suffix or ".lua",
        include=tuple(ns.include),
        source_map_url=None if ns.no_map_comment else map_path.name,
        embed_sources=not ns.no_sources_content,
    )
    provider = FileSystemSource(path.parent, options.extension, files={path.stem: path})
    result = Bundler(provider, options).bundle(path.stem, output_file=minified_path.name)

    minified_path.write_text(result.code, encoding="utf-8")
    map_path.write_text(result.source_map.to_json(), encoding="utf-8")
    if ns.verbose:
        print(f"Minified {path.name} written to: {minified_path}")


def main(argv: list[str] | None = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    status = 0
    for path in ns.files:
        if not path.is_file():
            print(f"No such file: {path}", file=sys.stderr)
            status = 1
            continue
        try:
            process_file(path, ns)
        except (LuaminError, OSError) as exc:
            print(f"[luamin] error: {path}: {exc}", file=sys.stderr)
            status = 1
    return status


if __name__ == "__main__":
    raise SystemExit(main())
