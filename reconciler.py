# reconciler.py
"""Merges wireless associations, the neighbor table and DHCP leases into one device list."""
import locale
import logging
from concurrent import futures
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

from annotation_store import AnnotationStore
from device import (Annotation, ConnectionType, DeviceRecord, HostHints, Lease, LeaseConfig,
                    StationRecord, WifiDetails, WirelessNetwork)
from errors import FeedUnavailable
from lease_time import compute_online_duration, host_overrides, parse_lease_duration
from routers.base import BaseRouter
from utils import format_mac
from wifi_format import (classify_protocol_generation, classify_signal_icon, format_frequency_band,
                         format_rate_descriptor, format_signal)

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 30
UNKNOWN_NAME = "?"

VendorLookup = Callable[[str], Optional[str]]

@dataclass(frozen=True)
class Feeds:
    """Raw inputs of one reconciliation pass."""
    networks: List[WirelessNetwork] = field(default_factory=list)
    neighbors: List[str] = field(default_factory=list)
    hints: HostHints = field(default_factory=HostHints)
    leases: List[Lease] = field(default_factory=list)
    lease_config: LeaseConfig = field(default_factory=LeaseConfig)

@dataclass(frozen=True)
class Snapshot:
    devices: List[DeviceRecord]
    annotations: Dict[str, Annotation]

def gather_feeds(router: BaseRouter, timeout: Optional[float] = None) -> Feeds:
    """Fetches every feed concurrently; a feed that fails or times out comes back empty."""
    fetchers = {
        "networks": (router.fetch_wireless_networks, list),
        "neighbors": (router.fetch_neighbor_table, list),
        "hints": (router.fetch_host_hints, HostHints),
        "leases": (router.fetch_leases, list),
        "lease_config": (router.fetch_lease_config, LeaseConfig),
    }
    pool = futures.ThreadPoolExecutor(max_workers=len(fetchers), thread_name_prefix="feed")
    try:
        pending = {name: pool.submit(fetch) for name, (fetch, _) in fetchers.items()}
        futures.wait(pending.values(), timeout=timeout)
        results = {}
        for name, future in pending.items():
            results[name] = _result_or_default(name, future, fetchers[name][1])
    finally:
        pool.shutdown(wait=False, cancel_futures=True)
    return Feeds(**results)

def _result_or_default(name: str, future: futures.Future, default: Callable):
    if not future.done():
        logger.warning(f"Feed '{name}' timed out; treating it as empty")
        return default()
    try:
        return future.result()
    except FeedUnavailable as err:
        logger.warning(f"Feed '{name}' unavailable: {err}")
    except Exception:  # pylint: disable=broad-except
        logger.exception(f"Unexpected error in feed '{name}'")
    return default()

def _display_name(hints: HostHints, mac: str) -> str:
    name = hints.hostname_by_mac(mac)
    return name[:MAX_NAME_LENGTH] if name else UNKNOWN_NAME

def _positive(seconds: Optional[int]) -> Optional[int]:
    return seconds if seconds is not None and seconds > 0 else None

def _vendor(mac: str, vendor_lookup: Optional[VendorLookup]) -> Optional[str]:
    if vendor_lookup is None:
        return None
    try:
        return vendor_lookup(mac)
    except Exception as e:  # pylint: disable=broad-except
        logger.debug(f"Could not determine vendor for MAC {mac}: {e}")
        return None

def _wifi_record(network: WirelessNetwork, band: str, station: StationRecord, feeds: Feeds,
                 online: Dict[str, int], annotations: Dict[str, Annotation],
                 vendor_lookup: Optional[VendorLookup]) -> DeviceRecord:
    mac = format_mac(station.mac)
    duration = _positive(station.connected_time)
    if duration is None:
        duration = _positive(online.get(mac))
    return DeviceRecord(
        hardware_address=mac,
        display_name=_display_name(feeds.hints, mac),
        connection_type=ConnectionType.WIFI,
        wifi=WifiDetails(
            ssid=network.ssid,
            band=band,
            signal=station.signal,
            noise=station.noise,
            protocol=classify_protocol_generation(station.rx, station.tx),
            rx_rate=format_rate_descriptor(station.rx),
            tx_rate=format_rate_descriptor(station.tx),
        ),
        ipv4_address=feeds.hints.ipv4_by_mac(mac) or "-",
        ipv6_address=feeds.hints.ipv6_by_mac(mac) or "-",
        online_duration_seconds=duration,
        annotation=annotations.get(mac),
        vendor=_vendor(mac, vendor_lookup),
        signal_icon=classify_signal_icon(station.signal),
        signal_text=format_signal(station.signal, station.noise),
    )

def _wired_record(mac: str, feeds: Feeds, online: Dict[str, int],
                  annotations: Dict[str, Annotation],
                  vendor_lookup: Optional[VendorLookup]) -> DeviceRecord:
    return DeviceRecord(
        hardware_address=mac,
        display_name=_display_name(feeds.hints, mac),
        connection_type=ConnectionType.WIRED,
        ipv4_address=feeds.hints.ipv4_by_mac(mac) or "-",
        ipv6_address=feeds.hints.ipv6_by_mac(mac) or "-",
        online_duration_seconds=_positive(online.get(mac)),
        annotation=annotations.get(mac),
        vendor=_vendor(mac, vendor_lookup),
    )

def sort_key(record: DeviceRecord) -> str:
    """Locale-aware, case-insensitive collation key on the display name."""
    return locale.strxfrm(record.display_name.casefold())

def reconcile(feeds: Feeds, annotations: Optional[Dict[str, Annotation]] = None,
              show_all_users: bool = True,
              vendor_lookup: Optional[VendorLookup] = None) -> List[DeviceRecord]:
    """Builds the deduplicated, sorted device list for one pass.

    Stations seen in a wireless association list become ``wifi`` records.
    Neighbor-table MACs not already covered become ``wired`` records,
    unless ``show_all_users`` is off. Every MAC appears at most once.
    """
    annotations = {format_mac(mac): a for mac, a in (annotations or {}).items()}
    overrides = host_overrides(feeds.lease_config.per_host)
    default_seconds = parse_lease_duration(feeds.lease_config.network_default)
    online = compute_online_duration(feeds.leases, overrides, default_seconds)

    records: List[DeviceRecord] = []
    seen: Set[str] = set()
    for network in feeds.networks:
        band = format_frequency_band(network.frequency)
        for station in network.associations:
            mac = format_mac(station.mac)
            if mac in seen:
                logger.debug(f"Station {mac} associated more than once; keeping first network")
                continue
            seen.add(mac)
            records.append(_wifi_record(network, band, station, feeds, online, annotations, vendor_lookup))

    if show_all_users:
        for mac in feeds.neighbors:
            mac = format_mac(mac)
            if mac in seen:
                continue
            seen.add(mac)
            records.append(_wired_record(mac, feeds, online, annotations, vendor_lookup))

    records.sort(key=sort_key)
    logger.info(f"Reconciled {len(records)} online devices")
    return records

def refresh(router: BaseRouter, store: AnnotationStore, timeout: Optional[float] = None,
            vendor_lookup: Optional[VendorLookup] = None) -> Snapshot:
    """Runs one full pass: reload annotations, gather feeds, reconcile."""
    annotations = store.load()
    feeds = gather_feeds(router, timeout=timeout)
    devices = reconcile(feeds, annotations, show_all_users=store.show_all_users,
                        vendor_lookup=vendor_lookup)
    return Snapshot(devices=devices, annotations=annotations)
