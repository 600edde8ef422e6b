import json
from pathlib import Path

from PIL import Image

from pc88_semigraphic import cli


def write_project(directory: Path, images) -> Path:
    data = {
        "name": "CLI Project",
        "version": "1.0.0",
        "images": images,
        "sequences": [
            {"name": "Idle", "loop": False, "frames": [{"imageId": "1", "x": 0, "y": 0, "waitTime": 2}]}
        ],
        "settings": {"canvasWidth": 640, "canvasHeight": 400},
    }
    path = directory / "project.zdp"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_cli_writes_listing(tmp_path: Path, capsys) -> None:
    Image.new("RGBA", (4, 4), (255, 255, 0, 255)).save(tmp_path / "idle.png")
    project = write_project(tmp_path, [{"id": "1", "filename": "idle.png", "width": 4, "height": 4}])
    output = tmp_path / "out" / "dance.asm"

    assert cli.main([str(project), str(output)]) == 0

    text = output.read_text(encoding="utf-8")
    assert "Image_001:" in text
    assert "\tDB\t$FF, $FF" in text
    assert "Attr_001:" in text
    assert "\tDB\t1, 0, $D8" in text
    assert "Sequence_000:" in text
    captured = capsys.readouterr()
    assert "wrote" in captured.out


def test_cli_continues_when_image_missing(tmp_path: Path, capsys) -> None:
    project = write_project(tmp_path, [{"id": "1", "filename": "gone.png", "width": 4, "height": 4}])
    output = tmp_path / "dance.asm"

    assert cli.main([str(project), str(output)]) == 0

    text = output.read_text(encoding="utf-8")
    assert "; Image data not loaded for: gone.png" in text
    captured = capsys.readouterr()
    assert "Warning: Image file not found: gone.png" in captured.out


def test_cli_dump(tmp_path: Path, capsys) -> None:
    Image.new("RGBA", (2, 4), (255, 0, 0, 255)).save(tmp_path / "idle.png")
    project = write_project(tmp_path, [{"id": "1", "filename": "idle.png", "width": 2, "height": 4}])

    assert cli.main([str(project), str(tmp_path / "dance.asm"), "--dump"]) == 0

    out = capsys.readouterr().out
    assert "row 0: [ff:2]" in out
    assert "blocks: 1, non-empty: 1, colors: red=1" in out


def test_cli_character_options(tmp_path: Path) -> None:
    project = write_project(tmp_path, [])
    output = tmp_path / "dance.asm"

    assert cli.main([str(project), str(output), "--character-width", "16", "--attr-count", "3"]) == 0

    text = output.read_text(encoding="utf-8")
    assert ".wByte       equ 16 / 2" in text
    assert ".attrCount   equ 3" in text
    assert "; No images in project" in text


def test_cli_invalid_project(tmp_path: Path, capsys) -> None:
    project = tmp_path / "bad.zdp"
    project.write_text("{}", encoding="utf-8")

    assert cli.main([str(project), str(tmp_path / "dance.asm")]) == 1
    assert "requires" in capsys.readouterr().err


def test_cli_write_failure(tmp_path: Path, capsys) -> None:
    project = write_project(tmp_path, [])
    output = tmp_path / "taken"
    output.mkdir()

    assert cli.main([str(project), str(output)]) == 1
    assert "Failed to write" in capsys.readouterr().err


def test_cli_rejects_non_object_settings(tmp_path: Path, capsys) -> None:
    project = tmp_path / "bad.zdp"
    project.write_text(
        json.dumps({"name": "p", "version": "1", "images": [], "sequences": [], "settings": "bad"}),
        encoding="utf-8",
    )

    assert cli.main([str(project), str(tmp_path / "dance.asm")]) == 1
    assert "settings must be a JSON object" in capsys.readouterr().err
