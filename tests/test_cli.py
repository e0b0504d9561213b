import base64
import json

import pytest

from barx.cli import main
from barx.code128 import generate
from barx.svg import DATA_URI_PREFIX


def test_pattern_command(capsys):
    main(["pattern", "1234"])
    out = capsys.readouterr().out
    assert out.strip() == generate("1234")


def test_svg_command_writes_file(tmp_path, capsys):
    out_file = tmp_path / "code.svg"
    main(["svg", "HELLO123", "-o", str(out_file), "--bar-width", "3", "--fg", "#FF0000"])
    content = out_file.read_text(encoding="utf-8")
    assert 'fill="#FF0000"' in content
    assert "HELLO123" in content
    assert "Saved:" in capsys.readouterr().out


def test_svg_command_custom_label(tmp_path):
    out_file = tmp_path / "label.svg"
    main(["svg", "12345678", "-o", str(out_file), "--label", "Box 7"])
    content = out_file.read_text(encoding="utf-8")
    assert "Box 7" in content
    assert ">12345678<" not in content


def test_base64_command_uses_config_file(tmp_path, capsys):
    config = tmp_path / "barcode.json"
    config.write_text(json.dumps({"defaults": {"background_color": "#F0F0F0"}}))
    main(["base64", "WEB456", "--config", str(config), "--no-text"])
    uri = capsys.readouterr().out.strip()
    svg = base64.b64decode(uri[len(DATA_URI_PREFIX):]).decode("utf-8")
    assert 'fill="#F0F0F0"' in svg
    assert "<text" not in svg


def test_validate_command_exit_codes(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["validate", "123456789", "HELLO123"])
    assert exc.value.code == 0

    with pytest.raises(SystemExit) as exc:
        main(["validate", "HELLO123", "X" * 50])
    assert exc.value.code == 1
    assert "INVALID" in capsys.readouterr().out


def test_library_errors_exit_2(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["svg", "TEST", "-o", str(tmp_path / "missing" / "x.svg")])
    assert exc.value.code == 2
    assert "error: " in capsys.readouterr().err


def test_bad_color_exits_2():
    with pytest.raises(SystemExit) as exc:
        main(["base64", "TEST", "--bg", "nope"])
    assert exc.value.code == 2


def test_no_command_prints_help():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
