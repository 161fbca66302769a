# annotation_store.py
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from data import load_json_document, save_json_document
from device import Annotation
from utils import format_mac

logger = logging.getLogger(__name__)

DEFAULT_ICON_NAME = "default.png"
MAX_ICON_INDEX = 50

class AnnotationStore:
    """Custom icon and label per MAC, persisted in a single JSON document.

    On disk the document looks like::

        {"users": {"icon": {"AA:BB:...": "/luci-static/..."},
                   "label": {"AA:BB:...": "Kid's Tablet"}},
         "showAllUsers": true}

    Other top-level keys are carried through untouched. Every mutation
    rewrites the whole file before returning.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._document: Dict = {}
        self._icons: Dict[str, str] = {}
        self._labels: Dict[str, str] = {}

    def load(self) -> Dict[str, Annotation]:
        """(Re)reads the file. Missing or malformed content yields an empty set."""
        self._document = load_json_document(self.path)
        users = self._document.get("users")
        if not isinstance(users, dict):
            if users is not None:
                logger.warning(f"Ignoring malformed 'users' section in {self.path}")
            users = {}
        self._icons = self._string_map(users.get("icon"))
        self._labels = self._string_map(users.get("label"))
        return self.snapshot()

    @staticmethod
    def _string_map(section) -> Dict[str, str]:
        if not isinstance(section, dict):
            return {}
        return {format_mac(mac): value for mac, value in section.items()
                if isinstance(mac, str) and isinstance(value, str) and value}

    def snapshot(self) -> Dict[str, Annotation]:
        """Current annotations keyed by MAC, for a reconciliation pass."""
        return {mac: self.get(mac) for mac in sorted(set(self._icons) | set(self._labels))}

    def get(self, mac: str) -> Annotation:
        mac = format_mac(mac)
        return Annotation(icon_path=self._icons.get(mac), label=self._labels.get(mac))

    def icon_for(self, mac: str, default: str) -> str:
        return self._icons.get(format_mac(mac), default)

    def set_icon(self, mac: str, path: str):
        mac = format_mac(mac)
        if self._icons.get(mac) == path:
            return
        icons = dict(self._icons)
        icons[mac] = path
        self._save(icons=icons)

    def set_label(self, mac: str, label: Optional[str]):
        """Sets the custom label; an empty label removes the override."""
        if not label:
            self.clear_label(mac)
            return
        mac = format_mac(mac)
        if self._labels.get(mac) == label:
            return
        labels = dict(self._labels)
        labels[mac] = label
        self._save(labels=labels)

    def clear_label(self, mac: str):
        labels = dict(self._labels)
        labels.pop(format_mac(mac), None)
        self._save(labels=labels)

    @property
    def show_all_users(self) -> bool:
        """Whether wired (neighbor-table only) devices are listed as well."""
        return bool(self._document.get("showAllUsers", True))

    def set_show_all_users(self, value: bool):
        self._save(show_all_users=bool(value))

    def _save(self, icons: Optional[Dict[str, str]] = None, labels: Optional[Dict[str, str]] = None,
              show_all_users: Optional[bool] = None) -> None:
        """Writes the document with the given changes; memory is only updated once the file is."""
        icons = self._icons if icons is None else icons
        labels = self._labels if labels is None else labels
        document = dict(self._document)
        if show_all_users is not None:
            document["showAllUsers"] = show_all_users
        users = document.get("users")
        users = dict(users) if isinstance(users, dict) else {}
        users["icon"] = dict(icons)
        users["label"] = dict(labels)
        document["users"] = users
        save_json_document(document, self.path)
        self._document = document
        self._icons = icons
        self._labels = labels
        logger.debug(f"Saved {len(icons)} icons and {len(labels)} labels to {self.path}")

def device_icon_paths(names: Iterable[str], resource_base: str) -> List[str]:
    """Builds the sorted icon picker list from the files in the device icon directory."""
    paths = []
    for index, name in enumerate(names):
        if index > MAX_ICON_INDEX:
            break
        if name == DEFAULT_ICON_NAME:
            continue
        paths.append(f"{resource_base.rstrip('/')}/icons/device/{name}")
    return sorted(paths)

def default_icon_path(resource_base: str) -> str:
    return f"{resource_base.rstrip('/')}/icons/device/{DEFAULT_ICON_NAME}"
