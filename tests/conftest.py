import pytest
from PIL import Image

from static_gallery import reporting, utils

TEMPLATE_PAGE = (
    "<!doctype html>\n<html><body><script>\n"
    "var gallery = /*{{BEGIN:data*/{}/*END:data}}*/;\n"
    "</script></body></html>\n"
)


@pytest.fixture(autouse=True)
def isolated_run(tmp_path, monkeypatch):
    monkeypatch.setenv(reporting.LOG_FILE_ENV, str(tmp_path / "static_gallery.log"))
    monkeypatch.delenv(utils.PIXEL_LIMIT_ENV, raising=False)
    utils.configure_executor_mode("thread")
    reporting.configure_verbosity(0)
    yield
    reporting.configure_verbosity(reporting.LEVEL_ERROR)


@pytest.fixture
def make_jpeg():
    """Write a small solid-color JPEG; distinct colors give distinct bytes."""

    def _make(path, color=(200, 30, 30), size=(320, 240)):
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color).save(path, "JPEG")
        return path

    return _make


@pytest.fixture
def template_dir(tmp_path):
    template = tmp_path / "template"
    template.mkdir()
    (template / "index.html").write_text(TEMPLATE_PAGE, encoding="utf-8")
    (template / "style.css").write_text("body { margin: 0; }\n", encoding="utf-8")
    return template
