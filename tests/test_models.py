import pytest

from static_gallery.models.collection import Collection, CollectionInput
from static_gallery.models.gallery import Gallery
from static_gallery.models.image import Image, Picture
from static_gallery.models.resolution import Resolution


def test_resolution_parse():
    assert Resolution.parse("960x540") == Resolution(960, 540)
    assert Resolution.parse("1920X1080") == Resolution(1920, 1080)
    assert str(Resolution(2560, 1440)) == "2560x1440"


@pytest.mark.parametrize("value", ["960", "axb", "100x540", "960x149", "1x2x3"])
def test_resolution_parse_rejects(value):
    with pytest.raises(ValueError):
        Resolution.parse(value)


def test_collection_input_parse():
    item = CollectionInput.parse("in/;-;My Trip")
    assert item.input_dir == "in/"
    assert item.background_dir is None
    assert item.title == "My Trip"
    assert item.name == "my_trip"


def test_collection_input_title_keeps_semicolons():
    item = CollectionInput.parse("-;bg;A;B")
    assert item.input_dir is None
    assert item.background_dir == "bg"
    assert item.title == "A;B"


def test_collection_input_parse_rejects_short_value():
    with pytest.raises(ValueError):
        CollectionInput.parse("in/;Title")


def test_image_stem_is_identity():
    assert Image(identity=42, source_path=None).stem == "42"
    assert Picture(identity=7, source_path="x.jpg").title == ""


def test_append_preserves_order():
    first = Collection(
        title="T",
        name="t",
        pictures=[Picture(identity=i, source_path=f"{i}.jpg") for i in range(3)],
    )
    second = Collection(
        title="T",
        name="t",
        pictures=[Picture(identity=i, source_path=f"{i}.jpg") for i in (10, 11)],
        backgrounds=[Image(identity=99, source_path="bg.jpg")],
    )

    first.append(second)

    assert [p.identity for p in first.pictures] == [0, 1, 2, 10, 11]
    assert [b.identity for b in first.backgrounds] == [99]


def test_remove_by_identity_removes_all_roles():
    collection = Collection(
        title="T",
        name="t",
        pictures=[Picture(identity=1, source_path="a"), Picture(identity=2, source_path="b")],
        backgrounds=[Image(identity=1, source_path="a")],
    )
    assert collection.remove_by_identity(1) == 2
    assert [p.identity for p in collection.pictures] == [2]
    assert collection.backgrounds == []
    assert collection.remove_by_identity(1) == 0


def test_gallery_iteration_order():
    gallery = Gallery()
    gallery.add_collection(
        Collection(
            title="B",
            name="b",
            pictures=[Picture(identity=2, source_path="p")],
            backgrounds=[Image(identity=1, source_path="q")],
        )
    )
    gallery.add_collection(Collection(title="A", name="a", pictures=[Picture(identity=3, source_path="r")]))

    assert [(key, image.identity) for key, image in gallery.iter_images()] == [("b", 1), ("b", 2), ("a", 3)]
    with pytest.raises(KeyError):
        gallery.add_collection(Collection(title="A", name="a"))


def test_remove_by_identity_can_target_one_role():
    collection = Collection(
        title="T",
        name="t",
        pictures=[Picture(identity=1, source_path="a")],
        backgrounds=[Image(identity=1, source_path="a")],
    )
    assert collection.remove_by_identity(1, pictures=False) == 1
    assert collection.backgrounds == []
    assert [p.identity for p in collection.pictures] == [1]
