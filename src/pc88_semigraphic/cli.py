"""Command line interface for the semi-graphic Z80 exporter."""

from __future__ import annotations

import argparse
import sys
import warnings
from pathlib import Path

from .converter import convert_rgba_to_semigraphic, format_semigraphic_debug, get_statistics
from .exporter import ExportOptions, export_project
from .palette import format_palette_text, get_color_name
from .project import ProjectData, ProjectFormatError, load_images_for_project, load_project


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Convert the images of a .zdp project into PC-8801 semi-graphic data and "
            "write a Z80 assembly listing (pattern and color attribute DB tables plus "
            "animation sequence tables).\n"
            f"Digital palette: {format_palette_text()}"
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("project", help="Project file (.zdp)")
    parser.add_argument("output", help="Output assembly file (.asm)")
    parser.add_argument(
        "--character-width",
        type=int,
        default=32,
        help="Character width in dots written to the Character header",
    )
    parser.add_argument(
        "--character-height",
        type=int,
        default=68,
        help="Character height in dots written to the Character header",
    )
    parser.add_argument(
        "--attr-count",
        type=int,
        default=10,
        help="Color changes per row written to the Character header",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print a debug dump and statistics of every converted image",
    )
    return parser


def dump_images(project: ProjectData) -> None:
    for image in project.images:
        if image.pixels is None:
            continue
        semi_data = convert_rgba_to_semigraphic(image.pixels)
        stats = get_statistics(semi_data)
        print(f"[{image.id}] {image.filename}")
        print(format_semigraphic_debug(semi_data))
        colors = ", ".join(
            f"{get_color_name(code)}={count}" for code, count in stats.color_frequency.items()
        )
        print(
            f"blocks: {stats.total_blocks}, non-empty: {stats.non_empty_blocks}, colors: {colors}"
        )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    project_path = Path(args.project).resolve()
    output_path = Path(args.output).resolve()
    print(f"input: {project_path}")
    print(f"output: {output_path}")

    try:
        project = load_project(project_path)
    except ProjectFormatError as exc:
        print(exc, file=sys.stderr)
        return 1

    print(f"loaded project: {project.name} (v{project.version})")
    print(f"  images: {len(project.images)}")
    print(f"  sequences: {len(project.sequences)}")

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        all_loaded = load_images_for_project(project, project_path)
    for warning in caught:
        print(f"Warning: {warning.message}")
    if not all_loaded:
        print("Some images could not be loaded; continuing without them.")

    if args.dump:
        dump_images(project)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        print(f"Failed to create output directory: {exc}", file=sys.stderr)
        return 1

    options = ExportOptions(
        output_path=output_path,
        character_width=args.character_width,
        character_height=args.character_height,
        attribute_count=args.attr_count,
    )
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        result = export_project(project, options)
    for warning in caught:
        print(f"Warning: {warning.message}")

    if not result.success:
        print(f"Failed to write {output_path}: {result.error}", file=sys.stderr)
        return 1

    print(f"wrote {result.output_path} ({result.lines_generated} lines, {result.size_bytes} bytes)")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
