"""Project data model and loading helpers for ``.zdp`` project files."""

from __future__ import annotations

import json
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .converter import RgbaImage, load_rgba_image

PROJECT_EXTENSION = ".zdp"


class ProjectFormatError(Exception):
    """Raised when a project file is missing or malformed."""


@dataclass
class ImageResource:
    id: str
    filename: str
    width: int = 0
    height: int = 0
    file_path: str | None = None
    pixels: RgbaImage | None = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageResource":
        return cls(
            id=str(data["id"]),
            filename=str(data["filename"]),
            width=int(data.get("width", 0)),
            height=int(data.get("height", 0)),
            file_path=data.get("filePath"),
        )


@dataclass
class AnimationFrame:
    image_id: str
    x: int = 0
    y: int = 0
    wait_time: int = 0  # in 1/60 s frames

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnimationFrame":
        return cls(
            image_id=str(data["imageId"]),
            x=int(data.get("x", 0)),
            y=int(data.get("y", 0)),
            wait_time=int(data.get("waitTime", 0)),
        )


@dataclass
class AnimationSequence:
    name: str
    frames: List[AnimationFrame] = field(default_factory=list)
    loop: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnimationSequence":
        return cls(
            name=str(data.get("name", "")),
            frames=[AnimationFrame.from_dict(frame) for frame in data.get("frames", [])],
            loop=bool(data.get("loop", False)),
        )


@dataclass
class ProjectSettings:
    canvas_width: int = 640
    canvas_height: int = 400
    default_frame_rate: int = 60
    background_color: str = "#000000"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectSettings":
        defaults = cls()
        return cls(
            canvas_width=int(data.get("canvasWidth", defaults.canvas_width)),
            canvas_height=int(data.get("canvasHeight", defaults.canvas_height)),
            default_frame_rate=int(data.get("defaultFrameRate", defaults.default_frame_rate)),
            background_color=str(data.get("backgroundColor", defaults.background_color)),
        )


@dataclass
class ProjectData:
    name: str
    version: str = "1.0.0"
    images: List[ImageResource] = field(default_factory=list)
    sequences: List[AnimationSequence] = field(default_factory=list)
    settings: ProjectSettings = field(default_factory=ProjectSettings)
    created_at: str = ""
    updated_at: str = ""

    def find_image(self, image_id: str) -> ImageResource | None:
        for image in self.images:
            if image.id == image_id:
                return image
        return None

    @classmethod
    def from_dict(cls, data: Any) -> "ProjectData":
        if not isinstance(data, dict):
            raise ProjectFormatError("Project data must be a JSON object")
        if not data.get("name") or not data.get("version"):
            raise ProjectFormatError("Project data requires 'name' and 'version'")
        if not isinstance(data.get("images"), list) or not isinstance(data.get("sequences"), list):
            raise ProjectFormatError("Project data requires 'images' and 'sequences' lists")
        if not isinstance(data.get("settings") or {}, dict):
            raise ProjectFormatError("Project settings must be a JSON object")

        try:
            return cls(
                name=str(data["name"]),
                version=str(data["version"]),
                images=[ImageResource.from_dict(item) for item in data["images"]],
                sequences=[AnimationSequence.from_dict(item) for item in data["sequences"]],
                settings=ProjectSettings.from_dict(data.get("settings") or {}),
                created_at=str(data.get("createdAt", "")),
                updated_at=str(data.get("updatedAt", "")),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ProjectFormatError(f"Invalid project entry: {exc}") from exc


def load_project(path: str | Path) -> ProjectData:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ProjectFormatError(f"Project file not found: {path}") from exc
    except OSError as exc:
        raise ProjectFormatError(f"Failed to read project file {path}: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProjectFormatError(f"Invalid JSON in project file {path}: {exc}") from exc

    return ProjectData.from_dict(data)


def image_candidates(project_path: str | Path, filename: str) -> List[Path]:
    """Paths searched for ``filename``, relative to the project file's directory."""

    if Path(filename).is_absolute():
        return [Path(filename)]

    project_dir = Path(project_path).resolve().parent
    return [
        project_dir / filename,
        project_dir / "images" / filename,
        project_dir / "image" / filename,
        project_dir / "assets" / filename,
        # Guess an extension for bare names.
        project_dir / f"{filename}.png",
        project_dir / "images" / f"{filename}.png",
        project_dir / f"{filename}.jpg",
        project_dir / "images" / f"{filename}.jpg",
    ]


def find_image_file(project_path: str | Path, filename: str) -> Path | None:
    candidates = image_candidates(project_path, filename)
    for candidate in candidates:
        if candidate.is_file():
            return candidate

    searched = "\n".join(f"  - {candidate}" for candidate in candidates)
    warnings.warn(f"Image file not found: {filename}\nSearched:\n{searched}", stacklevel=2)
    return None


def load_images_for_project(project: ProjectData, project_path: str | Path) -> bool:
    """Attach decoded pixels to every image resource that can be loaded.

    Images that cannot be found or decoded keep ``pixels=None``. Returns
    ``True`` only when every image was loaded.
    """

    all_loaded = True
    for resource in project.images:
        path = find_image_file(project_path, resource.filename)
        if path is None:
            all_loaded = False
            continue

        pixels = load_rgba_image(path)
        if pixels is None:
            all_loaded = False
            continue

        resource.pixels = pixels
        resource.file_path = str(path)
        resource.width = pixels.width
        resource.height = pixels.height
    return all_loaded
