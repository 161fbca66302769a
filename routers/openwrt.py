# routers/openwrt.py
import re
import json
import shlex
import logging
import threading
from typing import Dict, List, Optional

from .base import BaseRouter
from device import HostHints, Lease, LeaseConfig, RateInfo, StationRecord, WirelessNetwork
from errors import FeedUnavailable
from utils import format_mac, CommandFailed, SSHClient
from dynaconf import Dynaconf

logger = logging.getLogger(__name__)

UCI_OPTION = re.compile(r"^dhcp\.(?P<section>[^.=]+)\.(?P<option>[^.=]+)=(?P<value>.*)$")
UCI_SECTION = re.compile(r"^dhcp\.(?P<section>[^.=]+)=(?P<type>\w+)$")

DEAUTH_REASON = 5
BAN_TIME_MS = 5000

class OpenWrtRouter(BaseRouter):
    """Implementation of BaseRouter for OpenWrt routers, using ubus/uci over SSH."""

    def __init__(self, config: Dynaconf, ssh_client: Optional[SSHClient] = None):
        self.config = config
        self.router_ip = config.get("router_ip")
        self.router_user = config.get("router_user")
        self.ssh_timeout = config.get("ssh_timeout", 10)
        self.lan_device = config.get("lan_device", "br-lan")
        self.icon_dir = config.get("icon_dir", "/www/luci-static/resources/icons/device")
        self.ssh_client = ssh_client
        self._lock = threading.Lock()

    def _client(self) -> SSHClient:
        with self._lock:
            if self.ssh_client is None:
                self.ssh_client = SSHClient(hostname=self.router_ip, username=self.router_user,
                                            timeout=self.ssh_timeout)
            if self.ssh_client.client is None and not self.ssh_client.connect():
                raise FeedUnavailable(f"Could not connect to {self.router_ip}")
            return self.ssh_client

    def _run(self, command: str) -> str:
        try:
            return self._client().execute_command(command)
        except CommandFailed as err:
            raise FeedUnavailable(str(err)) from err

    def _ubus(self, obj: str, method: str, params: Optional[Dict] = None) -> Dict:
        command = f"ubus call {obj} {method}"
        if params is not None:
            command += " " + shlex.quote(json.dumps(params))
        output = self._run(command)
        try:
            data = json.loads(output or "{}")
        except json.JSONDecodeError as err:
            raise FeedUnavailable(f"Invalid JSON from '{command}': {err}") from err
        if not isinstance(data, dict):
            raise FeedUnavailable(f"Unexpected reply from '{command}'")
        return data

    # --- wireless -------------------------------------------------------

    def fetch_wireless_networks(self) -> List[WirelessNetwork]:
        networks = []
        for ifname in self._ubus("iwinfo", "devices").get("devices", []):
            info = self._ubus("iwinfo", "info", {"device": ifname})
            assoc = self._ubus("iwinfo", "assoclist", {"device": ifname})
            stations = [self._parse_station(entry) for entry in assoc.get("results", [])]
            networks.append(WirelessNetwork(
                ssid=info.get("ssid") or "",
                frequency=str(info.get("frequency") or ""),
                ifname=ifname,
                associations=[s for s in stations if s],
            ))
        logger.debug(f"Found {len(networks)} wireless networks")
        return networks

    def _parse_station(self, entry: Dict) -> Optional[StationRecord]:
        mac = entry.get("mac")
        if not mac:
            return None
        return StationRecord(
            mac=format_mac(mac),
            signal=int(entry.get("signal") or 0),
            noise=entry.get("noise") or None,
            connected_time=entry.get("connected_time"),
            rx=RateInfo.from_dict(entry.get("rx")),
            tx=RateInfo.from_dict(entry.get("tx")),
        )

    # --- neighbor table -------------------------------------------------

    def fetch_neighbor_table(self) -> List[str]:
        output = self._run(f"ip -4 neigh show dev {shlex.quote(self.lan_device)}")
        return self._parse_neighbor_table(output)

    def _parse_neighbor_table(self, output: str) -> List[str]:
        """Parses `ip neigh show dev X` lines such as '192.168.1.5 lladdr aa:bb:.. REACHABLE'."""
        macs = []
        for line in output.strip().splitlines():
            parts = line.split()
            if len(parts) >= 3 and parts[1] == "lladdr":
                macs.append(parts[2].upper())
        return macs

    # --- hints and leases ------------------------------------------------

    def fetch_host_hints(self) -> HostHints:
        data = self._ubus("luci-rpc", "getHostHints")
        return HostHints({format_mac(mac): hint for mac, hint in data.items() if isinstance(hint, dict)})

    def fetch_leases(self) -> List[Lease]:
        data = self._ubus("luci-rpc", "getDHCPLeases")
        leases = []
        for entry in data.get("dhcp_leases", []):
            mac = entry.get("macaddr")
            if not mac:
                continue
            expires = entry.get("expires")
            leases.append(Lease(
                mac=format_mac(mac),
                # luci-rpc reports `false` for leases that never expire
                expires_in_seconds=expires if isinstance(expires, int) and not isinstance(expires, bool) else 0,
                ipaddr=entry.get("ipaddr"),
                hostname=entry.get("hostname"),
            ))
        return leases

    def fetch_lease_config(self) -> LeaseConfig:
        try:
            network_default = self._run("uci -q get dhcp.lan.leasetime").strip() or None
        except FeedUnavailable:
            logger.debug("No lease time configured for dhcp.lan")
            network_default = None
        try:
            per_host = self._parse_uci_hosts(self._run("uci -q show dhcp"))
        except FeedUnavailable as err:
            logger.warning(f"Could not read per-host lease times: {err}")
            per_host = {}
        return LeaseConfig(network_default=network_default, per_host=per_host)

    def _parse_uci_hosts(self, output: str) -> Dict[str, str]:
        """Extracts MAC -> leasetime for every `host` section of `uci show dhcp`."""
        host_sections = set()
        options: Dict[str, Dict[str, str]] = {}
        for line in output.splitlines():
            line = line.strip()
            match = UCI_SECTION.match(line)
            if match:
                if match.group("type") == "host":
                    host_sections.add(match.group("section"))
                continue
            match = UCI_OPTION.match(line)
            if match:
                options.setdefault(match.group("section"), {})[match.group("option")] = match.group("value")

        per_host: Dict[str, str] = {}
        for section in host_sections:
            opts = options.get(section, {})
            if "mac" not in opts or "leasetime" not in opts:
                continue
            leasetime = self._uci_values(opts["leasetime"])
            for mac in self._uci_values(opts["mac"]):
                per_host[format_mac(mac)] = leasetime[0] if leasetime else ""
        return per_host

    @staticmethod
    def _uci_values(value: str) -> List[str]:
        quoted = re.findall(r"'([^']*)'", value)
        values = quoted if quoted else [value]
        return [v for part in values for v in part.split()]

    # --- actions --------------------------------------------------------

    def list_device_icons(self) -> List[str]:
        try:
            return self._run(f"ls {shlex.quote(self.icon_dir)}").split()
        except FeedUnavailable as err:
            logger.warning(f"Could not list device icons: {err}")
            return []

    def flush_neighbors(self) -> None:
        """Drops the neighbor table so the next pass only sees live hosts."""
        self._run(f"ip -4 neigh flush dev {shlex.quote(self.lan_device)}")
        logger.info(f"Flushed neighbor table on {self.lan_device}")

    def disconnect_client(self, mac: str, ifname: str) -> None:
        """Kicks a wireless station, via iwpriv on MediaTek drivers, else hostapd."""
        mac = format_mac(mac)
        try:
            self._run("test -x /usr/sbin/iwpriv")
            has_iwpriv = True
        except FeedUnavailable:
            has_iwpriv = False
        if has_iwpriv:
            self._run(f"/usr/sbin/iwpriv ra0 set DisConnectSta={mac}")
        else:
            self._ubus(f"hostapd.{ifname}", "del_client", {
                "addr": mac,
                "deauth": True,
                "reason": DEAUTH_REASON,
                "ban_time": BAN_TIME_MS,
            })
        logger.info(f"Disconnected {mac} from {ifname}")

    def close(self) -> None:
        if self.ssh_client:
            self.ssh_client.close()
