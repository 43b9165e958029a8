import pytest
from PIL import Image

from static_gallery import imaging
from static_gallery.exceptions import CodecError
from static_gallery.models.resolution import Resolution


def test_cover_size_scales_to_cover_box():
    assert imaging.cover_size((4000, 3000), Resolution(960, 540)) == (960, 720)
    assert imaging.cover_size((3000, 4000), Resolution(960, 540)) == (960, 1280)


def test_cover_size_never_upscales():
    assert imaging.cover_size((320, 240), Resolution(960, 540)) == (320, 240)


def test_render_resized_writes_covering_jpeg(tmp_path, make_jpeg):
    source = make_jpeg(tmp_path / "src.jpg", size=(800, 600))
    target = tmp_path / "out.jpg"

    imaging.render_resized(str(source), str(target), Resolution(200, 150), 80, "lanczos3")

    with Image.open(target) as img:
        assert img.format == "JPEG"
        assert img.size == (200, 150)


@pytest.mark.parametrize("method", sorted(imaging.RESIZE_METHODS))
def test_render_resized_supports_every_method(tmp_path, make_jpeg, method):
    source = make_jpeg(tmp_path / "src.jpg", size=(600, 400))
    target = tmp_path / f"{method}.jpg"
    imaging.render_resized(str(source), str(target), Resolution(150, 150), 70, method)
    with Image.open(target) as img:
        assert img.size == (225, 150)


def test_render_resized_applies_exif_orientation(tmp_path):
    source = tmp_path / "rotated.jpg"
    exif = Image.Exif()
    exif[0x0112] = 6  # rotate 90 degrees clockwise on display
    Image.new("RGB", (400, 200), (10, 20, 30)).save(source, "JPEG", exif=exif)
    target = tmp_path / "out.jpg"

    imaging.recode(str(source), str(target), 90)

    with Image.open(target) as img:
        assert img.size == (200, 400)


def test_recode_converts_to_rgb(tmp_path):
    source = tmp_path / "gray.jpg"
    Image.new("L", (300, 200), 128).save(source, "JPEG")
    target = tmp_path / "full.jpg"

    imaging.recode(str(source), str(target), 75)

    with Image.open(target) as img:
        assert img.mode == "RGB"
        assert img.size == (300, 200)


def test_corrupt_source_raises_codec_error(tmp_path):
    source = tmp_path / "broken.jpg"
    source.write_bytes(b"not a jpeg at all")
    target = tmp_path / "out.jpg"

    with pytest.raises(CodecError):
        imaging.render_resized(str(source), str(target), Resolution(200, 200), 75, "linear")
    with pytest.raises(CodecError):
        imaging.recode(str(source), str(target), 75)
    assert not target.exists()


def test_unknown_method_raises_codec_error(tmp_path, make_jpeg):
    source = make_jpeg(tmp_path / "src.jpg")
    with pytest.raises(CodecError):
        imaging.render_resized(str(source), str(tmp_path / "o.jpg"), Resolution(200, 200), 75, "bogus")


def test_failed_save_removes_partial_output(tmp_path, make_jpeg, monkeypatch):
    source = make_jpeg(tmp_path / "src.jpg")
    target = tmp_path / "partial.jpg"

    def failing_save(self, fp, *args, **kwargs):
        with open(fp, "wb") as handle:
            handle.write(b"partial")
        raise OSError("disk full")

    monkeypatch.setattr(Image.Image, "save", failing_save)

    with pytest.raises(CodecError):
        imaging.recode(str(source), str(target), 75)
    assert not target.exists()
