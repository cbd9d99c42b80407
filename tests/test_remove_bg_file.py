import pytest

import remove_bg_file
from conftest import image_part, make_image_bytes, make_response


def test_writes_png_for_image(tmp_path, fake_client, png_bytes):
    fake_client(response=make_response([image_part(png_bytes)]))
    source = tmp_path / "photo.jpg"
    source.write_bytes(make_image_bytes("JPEG"))
    output = tmp_path / "out" / "result.png"

    assert remove_bg_file.main([str(source), "-o", str(output)]) == 0
    assert output.read_bytes() == png_bytes


def test_rejects_non_image(tmp_path, fake_client, capsys):
    remote = fake_client(response=make_response([]))
    source = tmp_path / "notes.txt"
    source.write_text("hello")

    assert remove_bg_file.main([str(source)]) == 1
    assert "valid image file" in capsys.readouterr().err
    assert remote.models.calls == []


def test_reports_service_failure(tmp_path, fake_client, capsys):
    fake_client(response=make_response([]))
    source = tmp_path / "photo.png"
    source.write_bytes(make_image_bytes())

    assert remove_bg_file.main([str(source), "-o", str(tmp_path / "x.png")]) == 1
    assert "Failed to process image." in capsys.readouterr().err
    assert not (tmp_path / "x.png").exists()


def test_missing_input_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        remove_bg_file.main([str(tmp_path / "missing.png")])
