"""Z80 assembly listing generation for semi-graphic images and animations.

Each image produces two ``DB`` tables:

* ``Image_NNN``: one pattern byte per block, row-major, 16 bytes per line.
* ``Attr_NNN``: per row, a change count followed by ``x, attribute`` pairs.

Animation sequences become ``dw``/``db`` frame tables referencing the image
labels, terminated by ``dw 0``.
"""

from __future__ import annotations

import re
import warnings
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Sequence, Set, Tuple

from .converter import SemiGraphicData, convert_rgba_to_semigraphic
from .palette import BLACK, WHITE, WHITE_ATTRIBUTE, attribute_color_code
from .project import ProjectData

BYTES_PER_LINE = 16
SUPPORTED_FORMATS: Tuple[str, ...] = ("asm",)
FILE_EXTENSION = ".asm"

# Sentinel for "no color emitted yet"; never equal to a color code.
_NO_COLOR = -1


@dataclass
class ExportOptions:
    """Options for writing the listing."""

    output_path: Path | str = "output.asm"
    character_width: int = 32  # dots
    character_height: int = 68  # dots
    attribute_count: int = 10  # color changes per row


@dataclass
class ExportResult:
    success: bool
    output_path: Path | None = None
    lines_generated: int | None = None
    size_bytes: int | None = None
    error: str | None = None


def _hex(value: int) -> str:
    return f"${value:02X}"


def _chunks(values: Sequence[str], size: int) -> List[Sequence[str]]:
    return [values[i : i + size] for i in range(0, len(values), size)]


def generate_semigraphic_db(semi_data: SemiGraphicData, label: str = "SEMI_DATA") -> List[str]:
    """Pattern table: one byte per block, each grid row split into 16-byte lines."""

    lines = [
        f"{label}:",
        f"; Semi-graphic data ({semi_data.width}x{semi_data.height})",
    ]
    for row in semi_data.blocks:
        data_bytes = [_hex(block.pattern) for block in row]
        for chunk in _chunks(data_bytes, BYTES_PER_LINE):
            lines.append(f"\tDB\t{', '.join(chunk)}")
    return lines


def encode_color_row(row_colors: Sequence[int]) -> List[Tuple[int, int]]:
    """Encode one row of color codes as ``(x, attribute)`` change pairs.

    Leading white is dropped, trailing white is kept. Black never starts a
    change and leaves the active color untouched. A row with no change at all
    encodes as a single white change at x=0.
    """

    start = 0
    while start < len(row_colors) and row_colors[start] == WHITE:
        start += 1

    pairs: List[Tuple[int, int]] = []
    current = _NO_COLOR
    for x in range(start, len(row_colors)):
        code = row_colors[x]
        if code == BLACK or code == current:
            continue
        pairs.append((x, attribute_color_code(code)))
        current = code

    if not pairs:
        return [(0, WHITE_ATTRIBUTE)]
    return pairs


def generate_color_attribute_db(semi_data: SemiGraphicData, label: str = "COLOR_ATTR") -> List[str]:
    """Color attribute table: ``count, x1, attr1, x2, attr2, ...`` per grid row."""

    lines = [
        f"{label}:",
        f"; Color attribute data ({semi_data.width}x{semi_data.height})",
    ]
    for y in range(semi_data.height):
        pairs = encode_color_row(semi_data.row_colors(y))
        values = [str(len(pairs))]
        for x, attribute in pairs:
            values.append(str(x))
            values.append(_hex(attribute))
        lines.append(f"\tDB\t{', '.join(values)}")
    return lines


def image_label_number(image_id: str) -> str:
    """Zero-padded number used in ``Image_NNN`` labels.

    The leading integer of the id is used; ids without one keep their
    alphanumeric characters.
    """

    match = re.match(r"\s*(\d+)", image_id)
    if match:
        return f"{int(match.group(1)):03d}"
    return re.sub(r"\W", "_", image_id)


def _header_lines(project: ProjectData, generated_at: datetime) -> List[str]:
    settings = project.settings
    return [
        ";",
        "; Z80 Dancing Editor Generated Assembly Code",
        f"; Project: {project.name}",
        f"; Generated: {generated_at.isoformat()}",
        f"; Canvas Size: {settings.canvas_width}x{settings.canvas_height}",
        f"; Images: {len(project.images)}",
        f"; Sequences: {len(project.sequences)}",
        ";",
        "",
    ]


def _character_lines(options: ExportOptions) -> List[str]:
    return [
        "Character:",
        f".wByte       equ {options.character_width} / 2             ; character width in bytes",
        f".hByte       equ {options.character_height} / 4             ; character height in rows",
        f".attrCount   equ {options.attribute_count}                 ; color changes per row",
        "",
    ]


def _image_lines(project: ProjectData) -> Tuple[List[str], Set[str]]:
    """Image tables plus the set of image labels actually defined."""

    if not project.images:
        return ["; No images in project"], set()

    lines: List[str] = []
    defined: Set[str] = set()
    for image in project.images:
        lines.append("")
        lines.append(f"; Image: {image.filename} ({image.width}x{image.height})")

        if image.pixels is None:
            warnings.warn(f"Image data not loaded for: {image.filename}", stacklevel=3)
            lines.append(f"; Image data not loaded for: {image.filename}")
            continue

        number = image_label_number(image.id)
        if f"Image_{number}" in defined:
            warnings.warn(
                f"Image id {image.id} reuses label Image_{number}; table skipped", stacklevel=3
            )
            lines.append(f"; Label Image_{number} already defined, skipped: {image.filename}")
            continue
        defined.add(f"Image_{number}")

        semi_data = convert_rgba_to_semigraphic(image.pixels)
        lines.extend(generate_semigraphic_db(semi_data, f"Image_{number}"))
        lines.append("")
        lines.extend(generate_color_attribute_db(semi_data, f"Attr_{number}"))
        lines.append("")

        blocks = semi_data.width * semi_data.height
        lines.append(f"; Image {number} Size: {semi_data.width}x{semi_data.height} semi-graphic blocks")
        lines.append(f"; Data Size: {blocks} bytes (semi) + {blocks} bytes (color)")
    return lines, defined


def _sequence_lines(project: ProjectData, defined: Set[str]) -> List[str]:
    if not project.sequences:
        return ["; No sequences in project"]

    lines: List[str] = []
    for index, sequence in enumerate(project.sequences):
        lines.append("")
        lines.append(f"; Sequence: {sequence.name}")
        lines.append(f"; Frames: {len(sequence.frames)}, Loop: {str(sequence.loop).lower()}")
        lines.append(f"Sequence_{index:03d}:")

        for number, frame in enumerate(sequence.frames, start=1):
            label = f"Image_{image_label_number(frame.image_id)}"
            lines.append(
                f"\t; Frame {number}: Image {frame.image_id}, "
                f"Pos({frame.x},{frame.y}), Wait: {frame.wait_time}"
            )
            if label in defined:
                lines.append(f"\tdw\t{label}    ; character data address")
            else:
                lines.append(f"\tdw\t{label}    ; character data address (image not loaded)")
            lines.append(f"\tdb\t{frame.y}, {frame.x}        ; Y, X")
            lines.append(f"\tdb\t{frame.wait_time}           ; wait frames")

        lines.append("\tdw\t0            ; end of sequence")
    return lines


def generate_z80_code(
    project: ProjectData,
    options: ExportOptions | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Build the complete assembly listing for ``project``.

    Images whose pixels are not loaded get a placeholder comment; the rest of
    the listing is still produced.
    """

    options = options or ExportOptions()
    generated_at = generated_at or datetime.now(timezone.utc)

    lines = _header_lines(project, generated_at)

    lines.append("; === Image Data Section ===")
    lines.append("")
    lines.extend(_character_lines(options))
    image_lines, defined = _image_lines(project)
    lines.extend(image_lines)
    lines.append("")

    lines.append("; === Animation Sequences ===")
    lines.extend(_sequence_lines(project, defined))
    lines.append("")

    lines.append("; === End of Generated Code ===")
    return "\n".join(lines)


def export_project(project: ProjectData, options: ExportOptions) -> ExportResult:
    """Write the listing to ``options.output_path``.

    Write failures are reported through the result, not raised.
    """

    output_path = Path(options.output_path)
    code = generate_z80_code(project, options)
    try:
        output_path.write_text(code, encoding="utf-8")
        size = output_path.stat().st_size
    except OSError as exc:
        return ExportResult(success=False, output_path=output_path, error=str(exc))

    return ExportResult(
        success=True,
        output_path=output_path,
        lines_generated=len(code.split("\n")),
        size_bytes=size,
    )
