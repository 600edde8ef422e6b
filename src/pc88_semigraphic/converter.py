"""Core conversion logic: RGBA raster to PC-8801 semi-graphic blocks."""

# Reference: PC-8801 semi-graphic (text VRAM) mode
# - One character cell becomes a 2 x 4 dot block.
# - The pattern byte holds one bit per dot: left column bit0-3 (top to
#   bottom), right column bit4-7 (top to bottom).
# - Each block carries a single 3-bit digital color code; the color is set
#   through the run-length attribute table, see ``exporter``.

from __future__ import annotations

import warnings
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

from .palette import BLACK, nearest_color_index

if TYPE_CHECKING:
    from .project import ProjectData

BLOCK_WIDTH = 2
BLOCK_HEIGHT = 4
ALPHA_THRESHOLD = 127


class ConversionError(Exception):
    """Raised for pixel buffers that do not match their declared size."""


@dataclass(frozen=True)
class RgbaImage:
    """Decoded raster: ``width * height * 4`` bytes, row-major RGBA."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConversionError(
                f"Image size must be positive (got {self.width}x{self.height})"
            )
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ConversionError(
                f"RGBA buffer has {len(self.data)} bytes, expected {expected} "
                f"for {self.width}x{self.height}"
            )

    @classmethod
    def from_image(cls, image: Image.Image) -> "RgbaImage":
        rgba = image.convert("RGBA")
        width, height = rgba.size
        return cls(width, height, rgba.tobytes())


@dataclass(frozen=True)
class SemiGraphicBlock:
    pattern: int = 0
    color_code: int = BLACK


@dataclass(frozen=True)
class SemiGraphicData:
    """Grid of blocks addressed as ``blocks[y][x]``."""

    width: int
    height: int
    blocks: Tuple[Tuple[SemiGraphicBlock, ...], ...]

    def row_colors(self, y: int) -> List[int]:
        return [block.color_code for block in self.blocks[y]]

    def iter_blocks(self):
        for row in self.blocks:
            yield from row


@dataclass
class SemiGraphicStatistics:
    total_blocks: int
    used_colors: List[int]
    color_frequency: Dict[int, int] = field(default_factory=dict)
    non_empty_blocks: int = 0


def bit_index(dx: int, dy: int) -> int:
    """Bit position of dot (dx, dy) inside the pattern byte."""

    return dy if dx == 0 else BLOCK_HEIGHT + dy


def most_frequent_color(votes: Sequence[int]) -> int:
    """
    Pick the block color from per-dot color votes.

    Black votes never count. Without any other vote the block is black. On a
    tie the lowest color code reaching the maximum count wins.
    """
    frequency = Counter(code for code in votes if code != BLACK)
    best_code = BLACK
    best_count = 0
    for code in sorted(frequency):
        if frequency[code] > best_count:
            best_code = code
            best_count = frequency[code]
    return best_code


def _convert_block(image: RgbaImage, block_x: int, block_y: int) -> SemiGraphicBlock:
    pattern = 0
    votes: List[int] = []
    data = image.data

    for dy in range(BLOCK_HEIGHT):
        for dx in range(BLOCK_WIDTH):
            px = block_x * BLOCK_WIDTH + dx
            py = block_y * BLOCK_HEIGHT + dy
            # Dots outside the source image stay unset.
            if px >= image.width or py >= image.height:
                continue

            offset = (py * image.width + px) * 4
            r, g, b, a = data[offset : offset + 4]
            if a <= ALPHA_THRESHOLD:
                continue

            pattern |= 1 << bit_index(dx, dy)
            votes.append(nearest_color_index((r, g, b)))

    return SemiGraphicBlock(pattern=pattern, color_code=most_frequent_color(votes))


def convert_rgba_to_semigraphic(image: RgbaImage) -> SemiGraphicData:
    """Convert a decoded RGBA raster into a semi-graphic grid.

    The grid covers ``ceil(width / 2)`` x ``ceil(height / 4)`` blocks. A dot
    is set when its alpha exceeds 127; the set dots vote for the block color
    with their nearest digital color.
    """

    grid_width = -(-image.width // BLOCK_WIDTH)
    grid_height = -(-image.height // BLOCK_HEIGHT)

    blocks = tuple(
        tuple(_convert_block(image, x, y) for x in range(grid_width))
        for y in range(grid_height)
    )
    return SemiGraphicData(width=grid_width, height=grid_height, blocks=blocks)


def convert_buffer_to_semigraphic(width: int, height: int, data: bytes | bytearray) -> SemiGraphicData:
    return convert_rgba_to_semigraphic(RgbaImage(width, height, bytes(data)))


def convert_image_to_semigraphic(image: Image.Image) -> SemiGraphicData:
    """Convert an in-memory Pillow image."""

    return convert_rgba_to_semigraphic(RgbaImage.from_image(image))


def load_rgba_image(path: str | Path) -> RgbaImage | None:
    """Decode an image file into an :class:`RgbaImage`, or ``None`` on failure."""

    path = Path(path)
    try:
        with Image.open(path) as img:
            return RgbaImage.from_image(img)
    except FileNotFoundError:
        warnings.warn(f"Image file not found: {path}", stacklevel=2)
    except (UnidentifiedImageError, OSError, ConversionError) as exc:
        warnings.warn(f"Failed to read image {path}: {exc}", stacklevel=2)
    return None


def convert_image_file(path: str | Path) -> SemiGraphicData | None:
    """Decode ``path`` and convert it; returns ``None`` if it cannot be read."""

    image = load_rgba_image(path)
    if image is None:
        return None
    return convert_rgba_to_semigraphic(image)


def convert_image_from_project(
    project: "ProjectData",
    image_id: str,
    base_dir: str | Path | None = None,
) -> SemiGraphicData | None:
    """Convert the project image ``image_id`` by loading its file.

    Relative filenames are resolved against ``base_dir`` when given.
    """

    resource = project.find_image(image_id)
    if resource is None:
        warnings.warn(f"Image id {image_id} not found in project", stacklevel=2)
        return None

    path = Path(resource.file_path or resource.filename)
    if base_dir is not None and not path.is_absolute():
        path = Path(base_dir) / path
    return convert_image_file(path)


def calculate_semigraphic_size(image_width: int, image_height: int) -> Tuple[int, int]:
    return image_width // BLOCK_WIDTH, image_height // BLOCK_HEIGHT


def calculate_image_size(semi_width: int, semi_height: int) -> Tuple[int, int]:
    return semi_width * BLOCK_WIDTH, semi_height * BLOCK_HEIGHT


def get_statistics(semi_data: SemiGraphicData) -> SemiGraphicStatistics:
    frequency: Counter[int] = Counter()
    non_empty = 0
    for block in semi_data.iter_blocks():
        if block.pattern > 0:
            non_empty += 1
        frequency[block.color_code] += 1

    return SemiGraphicStatistics(
        total_blocks=semi_data.width * semi_data.height,
        used_colors=sorted(frequency),
        color_frequency=dict(sorted(frequency.items())),
        non_empty_blocks=non_empty,
    )


def format_semigraphic_debug(
    semi_data: SemiGraphicData, max_rows: int = 10, max_cols: int = 20
) -> str:
    """Render the top-left corner of a grid as ``[pattern:color]`` cells."""

    image_width, image_height = calculate_image_size(semi_data.width, semi_data.height)
    lines = [
        f"Semi-graphic data: {semi_data.width}x{semi_data.height} blocks",
        f"Source size: {image_width}x{image_height} pixels",
    ]
    for y, row in enumerate(semi_data.blocks[:max_rows]):
        cells = " ".join(f"[{block.pattern:02x}:{block.color_code}]" for block in row[:max_cols])
        lines.append(f"row {y}: {cells}")
    if semi_data.height > max_rows:
        lines.append(f"... ({semi_data.height - max_rows} rows omitted)")
    return "\n".join(lines)
