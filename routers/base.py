# routers/base.py
from abc import ABC, abstractmethod
from typing import List

from device import HostHints, Lease, LeaseConfig, WirelessNetwork


class BaseRouter(ABC):
    """Abstract base class for the raw feeds a router provides.

    Each fetch either returns its data or raises ``FeedUnavailable``;
    recovering from that is up to the caller.
    """

    @abstractmethod
    def fetch_wireless_networks(self) -> List[WirelessNetwork]:
        """Returns every active wireless network with its association list."""

    @abstractmethod
    def fetch_neighbor_table(self) -> List[str]:
        """Returns the uppercased MACs of directly reachable LAN hosts."""

    @abstractmethod
    def fetch_host_hints(self) -> HostHints:
        """Returns hostname/IPv4/IPv6 hints keyed by MAC."""

    @abstractmethod
    def fetch_leases(self) -> List[Lease]:
        """Returns the active DHCPv4 leases."""

    @abstractmethod
    def fetch_lease_config(self) -> LeaseConfig:
        """Returns the configured network-default and per-host lease times."""

    def list_device_icons(self) -> List[str]:
        """Returns the file names available in the device icon directory."""
        return []

    def close(self) -> None:
        """Releases any connection held by the router."""
