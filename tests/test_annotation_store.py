import json
from unittest import mock

import pytest

from annotation_store import AnnotationStore, default_icon_path, device_icon_paths
from device import Annotation

MAC = "AA:BB:CC:DD:EE:01"


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "overview.json"


def test_missing_file_loads_empty(store_path):
    store = AnnotationStore(store_path)
    assert store.load() == {}
    assert store.get(MAC) == Annotation()
    assert store.show_all_users is True


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"users": "nope"}', "\xff\xfe"])
def test_corrupt_file_loads_empty(store_path, content):
    store_path.write_text(content, encoding="latin-1")
    assert AnnotationStore(store_path).load() == {}


def test_corrupt_file_is_overwritten_on_save(store_path):
    store_path.write_text("{garbage", encoding="utf-8")
    store = AnnotationStore(store_path)
    store.load()
    store.set_label(MAC, "Printer")
    assert json.loads(store_path.read_text(encoding="utf-8")) == {
        "users": {"icon": {}, "label": {MAC: "Printer"}},
    }


def test_label_round_trip(store_path):
    store = AnnotationStore(store_path)
    store.load()
    store.set_label(MAC, "Kid's Tablet")

    reloaded = AnnotationStore(store_path)
    annotations = reloaded.load()
    assert annotations[MAC].label == "Kid's Tablet"
    assert reloaded.get(MAC.lower()).label == "Kid's Tablet"


def test_empty_label_clears_override(store_path):
    store = AnnotationStore(store_path)
    store.load()
    store.set_label(MAC, "Laptop")
    store.set_label(MAC, "")
    assert store.get(MAC).label is None
    assert AnnotationStore(store_path).load() == {}


def test_clear_label_keeps_icon(store_path):
    store = AnnotationStore(store_path)
    store.load()
    store.set_icon(MAC, "/luci-static/resources/icons/device/tv.png")
    store.set_label(MAC, "TV")
    store.clear_label(MAC)
    assert store.get(MAC) == Annotation(icon_path="/luci-static/resources/icons/device/tv.png")
    assert store.icon_for(MAC, "default.png").endswith("tv.png")
    assert store.icon_for("AA:BB:CC:DD:EE:99", "default.png") == "default.png"


def test_save_preserves_other_keys(store_path):
    store_path.write_text(json.dumps({
        "showAllUsers": False,
        "theme": "dark",
        "users": {"icon": {"aa:bb:cc:dd:ee:02": "/x.png"}, "extra": 1},
    }), encoding="utf-8")
    store = AnnotationStore(store_path)
    store.load()
    assert store.show_all_users is False
    store.set_label(MAC, "NAS")
    document = json.loads(store_path.read_text(encoding="utf-8"))
    assert document["theme"] == "dark"
    assert document["showAllUsers"] is False
    assert document["users"] == {
        "icon": {"AA:BB:CC:DD:EE:02": "/x.png"},
        "label": {MAC: "NAS"},
        "extra": 1,
    }


def test_toggle_show_all_users_persists(store_path):
    store = AnnotationStore(store_path)
    store.load()
    store.set_show_all_users(False)
    reloaded = AnnotationStore(store_path)
    reloaded.load()
    assert reloaded.show_all_users is False


def test_save_failure_is_raised(store_path):
    store = AnnotationStore(store_path)
    store.load()
    with mock.patch("data.os.replace", side_effect=PermissionError("read-only")):
        with pytest.raises(PermissionError):
            store.set_label(MAC, "Phone")
    assert store.get(MAC).label is None
    assert not store_path.exists()
    assert list(store_path.parent.iterdir()) == []


def test_device_icon_paths():
    names = ["tv.png", "default.png", "phone.png"]
    assert device_icon_paths(names, "/luci-static/resources/") == [
        "/luci-static/resources/icons/device/phone.png",
        "/luci-static/resources/icons/device/tv.png",
    ]
    assert default_icon_path("/res") == "/res/icons/device/default.png"


def test_device_icon_paths_caps_listing():
    names = [f"icon{i:03d}.png" for i in range(80)]
    assert len(device_icon_paths(names, "/res")) == 51


def test_failed_save_is_not_written_by_next_edit(store_path):
    store = AnnotationStore(store_path)
    store.load()
    with mock.patch("data.os.replace", side_effect=PermissionError("read-only")):
        with pytest.raises(PermissionError):
            store.set_label(MAC, "Phone")
        with pytest.raises(PermissionError):
            store.set_show_all_users(False)
    store.set_icon(MAC, "/p.png")
    document = json.loads(store_path.read_text(encoding="utf-8"))
    assert document == {"users": {"icon": {MAC: "/p.png"}, "label": {}}}
    assert store.show_all_users is True
