# online_users.py
import argparse
import json
import locale
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional

from annotation_store import AnnotationStore, default_icon_path, device_icon_paths
from device import ConnectionType, DeviceRecord
from lease_time import format_duration
from reconciler import refresh
from routers import get_router
from routers.openwrt import OpenWrtRouter
from dynaconf import Dynaconf
from mac_vendor_lookup import MacLookup

# Load settings
config = Dynaconf(
    settings_files=['config/settings.toml'],
    envvar_prefix="ONLINEUSERS",
)

logger = logging.getLogger(__name__)

def format_device(device: DeviceRecord) -> str:
    """One display line per device."""
    parts = [
        f"{device.label[:30]:<30}",
        f"{device.connection_type.value:<5}",
        device.hardware_address,
        f"{device.ipv4_address:<15}",
        f"up {format_duration(device.online_duration_seconds)}",
    ]
    if device.connection_type is ConnectionType.WIFI and device.wifi:
        wifi = device.wifi
        parts.append(f"{wifi.ssid} {wifi.band} {device.signal_text} {wifi.protocol}".rstrip())
    if device.vendor:
        parts.append(f"[{device.vendor}]")
    return "  ".join(parts)

def print_devices(devices: List[DeviceRecord], as_json: bool = False, icons: Optional[Dict[str, str]] = None):
    """Prints the device list; ``icons`` maps MAC -> icon path for JSON output."""
    if as_json:
        rows = []
        for d in devices:
            row = asdict(d)
            if icons is not None:
                row["icon"] = icons.get(d.hardware_address)
            rows.append(row)
        print(json.dumps(rows, indent=2, ensure_ascii=False))
        return
    wifi = sum(1 for d in devices if d.connection_type is ConnectionType.WIFI)
    print(f"Online users: {len(devices)} ({wifi} wifi, {len(devices) - wifi} wired)")
    for device in devices:
        print(format_device(device))

def run_pass(as_json: bool = False):
    """Performs one reconciliation pass and prints the result."""
    logger.info("Collecting online users")
    store = AnnotationStore(Path(config.general.get("annotation_file")))
    router = get_router(config)
    mac_lookup = MacLookup()
    try:
        snapshot = refresh(router, store, timeout=config.general.get("feed_timeout"),
                           vendor_lookup=mac_lookup.lookup)
    finally:
        router.close()
    default_icon = default_icon_path(config.general.get("resource_base", "/luci-static/resources"))
    icons = {d.hardware_address: store.icon_for(d.hardware_address, default_icon) for d in snapshot.devices}
    print_devices(snapshot.devices, as_json=as_json, icons=icons)

def list_icons():
    router = get_router(config)
    resource_base = config.general.get("resource_base", "/luci-static/resources")
    try:
        names = router.list_device_icons()
    finally:
        router.close()
    print(f"default: {default_icon_path(resource_base)}")
    for path in device_icon_paths(names, resource_base):
        print(path)

def main():
    parser = argparse.ArgumentParser(description="Online users on the local network")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--json", action="store_true", help="Print devices as JSON")
    parser.add_argument("--update-mac-db", action="store_true", help="Force update of the MAC vendor database")
    parser.add_argument("--set-label", nargs=2, metavar=("MAC", "LABEL"), help="Set a custom label ('' clears it)")
    parser.add_argument("--set-icon", nargs=2, metavar=("MAC", "PATH"), help="Set a custom icon")
    parser.add_argument("--toggle-all-users", action="store_true", help="Show or hide wired devices")
    parser.add_argument("--list-icons", action="store_true", help="List the available device icons")
    parser.add_argument("--flush-neighbors", action="store_true", help="Flush the neighbor table first")
    parser.add_argument("--disconnect", nargs=2, metavar=("MAC", "IFNAME"), help="Disconnect a wireless client")
    args = parser.parse_args()

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format='%(asctime)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as err:
        logger.warning(f"Could not apply the system collation locale: {err}")

    if args.update_mac_db:
        MacLookup().update_vendors()

    if args.set_label or args.set_icon or args.toggle_all_users:
        store = AnnotationStore(Path(config.general.get("annotation_file")))
        store.load()
        if args.set_label:
            store.set_label(*args.set_label)
        if args.set_icon:
            store.set_icon(*args.set_icon)
        if args.toggle_all_users:
            store.set_show_all_users(not store.show_all_users)
        return

    if args.list_icons:
        list_icons()
        return

    if args.flush_neighbors or args.disconnect:
        router = get_router(config)
        if not isinstance(router, OpenWrtRouter):
            parser.error("This router type does not support client actions")
        try:
            if args.flush_neighbors:
                router.flush_neighbors()
            if args.disconnect:
                router.disconnect_client(*args.disconnect)
        finally:
            router.close()

    run_pass(as_json=args.json)

if __name__ == "__main__":
    main()
