# device.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ConnectionType(str, Enum):
    WIFI = "wifi"
    WIRED = "wired"


@dataclass(frozen=True)
class RateInfo:
    """Per-direction rate counters of an associated station."""
    rate: int = 0  # kbit/s
    mhz: int = 0
    ht: bool = False
    vht: bool = False
    he: bool = False
    mcs: Optional[int] = None
    nss: Optional[int] = None
    short_gi: bool = False
    he_gi: Optional[int] = None
    he_dcm: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "RateInfo":
        data = data or {}
        return cls(
            rate=data.get("rate") or 0,
            mhz=data.get("mhz") or 0,
            ht=bool(data.get("ht")),
            vht=bool(data.get("vht")),
            he=bool(data.get("he")),
            mcs=data.get("mcs"),
            nss=data.get("nss"),
            short_gi=bool(data.get("short_gi")),
            he_gi=data.get("he_gi"),
            he_dcm=data.get("he_dcm"),
        )


@dataclass(frozen=True)
class StationRecord:
    mac: str
    signal: int
    noise: Optional[int] = None
    connected_time: Optional[int] = None
    rx: RateInfo = field(default_factory=RateInfo)
    tx: RateInfo = field(default_factory=RateInfo)


@dataclass(frozen=True)
class WirelessNetwork:
    ssid: str
    frequency: str
    ifname: Optional[str] = None
    associations: List[StationRecord] = field(default_factory=list)


@dataclass(frozen=True)
class Lease:
    mac: str
    expires_in_seconds: int
    ipaddr: Optional[str] = None
    hostname: Optional[str] = None


@dataclass(frozen=True)
class LeaseConfig:
    """Lease-duration strings as configured on the router (e.g. '12h')."""
    network_default: Optional[str] = None
    per_host: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Annotation:
    icon_path: Optional[str] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class WifiDetails:
    ssid: str
    band: str
    signal: int
    noise: Optional[int] = None
    protocol: str = ""
    rx_rate: str = ""
    tx_rate: str = ""


@dataclass(frozen=True)
class DeviceRecord:
    hardware_address: str
    display_name: str
    connection_type: ConnectionType
    wifi: Optional[WifiDetails] = None
    ipv4_address: str = "-"
    ipv6_address: str = "-"
    online_duration_seconds: Optional[int] = None  # None means unknown
    annotation: Optional[Annotation] = None
    vendor: Optional[str] = None
    signal_icon: Optional[str] = None
    signal_text: Optional[str] = None

    @property
    def label(self) -> str:
        """Custom label when one is set, otherwise the resolved hostname."""
        if self.annotation and self.annotation.label:
            return self.annotation.label
        return self.display_name


@dataclass(frozen=True)
class HostHints:
    """MAC-keyed hostname and address hints, as reported by the router."""
    hints: Dict[str, Dict] = field(default_factory=dict)

    def _hint(self, mac: str) -> Dict:
        return self.hints.get(mac.upper()) or {}

    def hostname_by_mac(self, mac: str) -> Optional[str]:
        return self._hint(mac).get("name") or None

    def ipv4_by_mac(self, mac: str) -> Optional[str]:
        addrs = self._hint(mac).get("ipaddrs") or []
        return addrs[0] if addrs else None

    def ipv6_by_mac(self, mac: str) -> Optional[str]:
        addrs = self._hint(mac).get("ip6addrs") or []
        return addrs[0] if addrs else None
