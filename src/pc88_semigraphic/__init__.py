"""PC-8801 semi-graphic converter and Z80 data exporter.

Images are converted into 2x4-dot semi-graphic blocks and written out as Z80
assembly ``DB`` tables (pattern bytes plus run-length color attributes). The
exporter can be invoked through the CLI (``pc88-semigraphic``) or imported.
"""

from .converter import (
    ConversionError,
    RgbaImage,
    SemiGraphicBlock,
    SemiGraphicData,
    SemiGraphicStatistics,
    calculate_image_size,
    calculate_semigraphic_size,
    convert_buffer_to_semigraphic,
    convert_image_file,
    convert_image_from_project,
    convert_image_to_semigraphic,
    convert_rgba_to_semigraphic,
    format_semigraphic_debug,
    get_statistics,
    load_rgba_image,
)
from .exporter import (
    ExportOptions,
    ExportResult,
    encode_color_row,
    export_project,
    generate_color_attribute_db,
    generate_semigraphic_db,
    generate_z80_code,
)
from .palette import (
    DIGITAL_COLORS,
    attribute_color_code,
    get_color_name,
    nearest_color_index,
)
from .project import (
    AnimationFrame,
    AnimationSequence,
    ImageResource,
    ProjectData,
    ProjectFormatError,
    ProjectSettings,
    load_images_for_project,
    load_project,
)

__all__ = [
    "AnimationFrame",
    "AnimationSequence",
    "ConversionError",
    "DIGITAL_COLORS",
    "ExportOptions",
    "ExportResult",
    "ImageResource",
    "ProjectData",
    "ProjectFormatError",
    "ProjectSettings",
    "RgbaImage",
    "SemiGraphicBlock",
    "SemiGraphicData",
    "SemiGraphicStatistics",
    "attribute_color_code",
    "calculate_image_size",
    "calculate_semigraphic_size",
    "convert_buffer_to_semigraphic",
    "convert_image_file",
    "convert_image_from_project",
    "convert_image_to_semigraphic",
    "convert_rgba_to_semigraphic",
    "encode_color_row",
    "export_project",
    "format_semigraphic_debug",
    "generate_color_attribute_db",
    "generate_semigraphic_db",
    "generate_z80_code",
    "get_color_name",
    "get_statistics",
    "load_images_for_project",
    "load_project",
    "load_rgba_image",
    "nearest_color_index",
]
