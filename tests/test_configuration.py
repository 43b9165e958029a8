import pytest

from static_gallery import cli, configuration
from static_gallery.configuration import RunConfig
from static_gallery.exceptions import ConfigurationError
from static_gallery.models.collection import CollectionInput
from static_gallery.models.resolution import Resolution


@pytest.fixture
def pictures(tmp_path, make_jpeg):
    make_jpeg(tmp_path / "pics" / "0.jpg")
    return tmp_path / "pics"


def _args(*argv):
    return cli.build_parser().parse_args(list(argv))


def test_from_args_builds_config(tmp_path, pictures, template_dir):
    args = _args(
        "-o", str(tmp_path / "out"),
        "-p", str(template_dir),
        "-c", f"{pictures};-;Trip",
        "--thumb-size", "400x300",
        "--threads", "3",
        "--jpeg-quality", "90",
    )

    config = configuration.from_args(args)

    assert config.collections[0].name == "trip"
    assert config.res_thumb == Resolution(400, 300)
    assert config.res_display == Resolution(2560, 1440)
    assert config.threads == 3
    assert config.jpeg_quality == 90
    assert config.create_output_dir is True
    assert config.delete_output_dir is False


def test_threads_zero_uses_core_count(tmp_path, pictures, template_dir, monkeypatch):
    monkeypatch.setattr(configuration, "resolve_worker_count", lambda value: 8 if value == 0 else value)
    args = _args("-o", str(tmp_path / "out"), "-p", str(template_dir), "-c", f"{pictures};-;T")
    assert configuration.from_args(args).threads == 8


def test_all_problems_are_reported_together(tmp_path, template_dir):
    args = _args(
        "-o", str(tmp_path / "out"),
        "-p", str(tmp_path / "no-template"),
        "-c", f"{tmp_path / 'empty'};-;-",
        "-c", "broken",
        "--thumb-size", "10x10",
        "--jpeg-quality", "0",
        "--resize-method", "sharpest",
    )

    with pytest.raises(ConfigurationError) as excinfo:
        configuration.from_args(args)

    message = str(excinfo.value)
    assert excinfo.value.exit_code == 2
    assert "three parts" in message
    assert "thumbnail" in message
    assert "Jpeg quality" in message
    assert "sharpest" in message
    assert "valid titles" in message
    assert "does not contain images" in message
    assert "Template directory" in message


def test_new_gallery_requires_picture_directory(tmp_path, template_dir, make_jpeg):
    make_jpeg(tmp_path / "bg" / "0.jpg")
    config = RunConfig(
        collections=[CollectionInput.parse(f"-;{tmp_path / 'bg'};Trip")],
        output_dir=str(tmp_path / "out"),
        template_dir=str(template_dir),
    )
    with pytest.raises(ConfigurationError, match="does not have an input directory"):
        configuration.validate(config)


def test_non_empty_output_requires_remove_flag(tmp_path, pictures, template_dir):
    out = tmp_path / "out"
    out.mkdir()
    (out / "leftover.txt").write_text("x")
    collections = [CollectionInput.parse(f"{pictures};-;Trip")]

    with pytest.raises(ConfigurationError, match="already exists"):
        configuration.validate(RunConfig(collections=collections, output_dir=str(out), template_dir=str(template_dir)))

    config = configuration.validate(
        RunConfig(collections=collections, output_dir=str(out), template_dir=str(template_dir), clean_output=True)
    )
    configuration.prepare_output(config)
    assert out.is_dir()
    assert list(out.iterdir()) == []


def test_update_requires_existing_page(tmp_path, pictures):
    out = tmp_path / "out"
    out.mkdir()
    collections = [CollectionInput.parse(f"{pictures};-;Trip")]

    with pytest.raises(ConfigurationError, match="cannot update"):
        configuration.validate(RunConfig(collections=collections, output_dir=str(out), update=True))

    (out / "index.html").write_text("page")
    config = configuration.validate(RunConfig(collections=collections, output_dir=str(out), update=True))
    assert config.create_output_dir is False
    assert config.delete_output_dir is False


def test_update_and_remove_are_exclusive(tmp_path, pictures):
    out = tmp_path / "out"
    out.mkdir()
    (out / "index.html").write_text("page")
    config = RunConfig(
        collections=[CollectionInput.parse(f"{pictures};-;Trip")],
        output_dir=str(out),
        update=True,
        clean_output=True,
    )
    with pytest.raises(ConfigurationError, match="mutually exclusive"):
        configuration.validate(config)


def test_no_collections(tmp_path, template_dir):
    config = RunConfig(collections=[], output_dir=str(tmp_path / "out"), template_dir=str(template_dir))
    with pytest.raises(ConfigurationError, match="No collections"):
        configuration.validate(config)
