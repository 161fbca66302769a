import time
from typing import List

from device import HostHints, Lease, LeaseConfig, WirelessNetwork
from routers.base import BaseRouter


class FakeRouter(BaseRouter):
    """In-memory router; a feed set to an exception instance raises it."""

    def __init__(self, networks=None, neighbors=None, hints=None, leases=None,
                 lease_config=None, delay=0.0):
        self.networks = networks if networks is not None else []
        self.neighbors = neighbors if neighbors is not None else []
        self.hints = hints if hints is not None else HostHints()
        self.leases = leases if leases is not None else []
        self.lease_config = lease_config if lease_config is not None else LeaseConfig()
        self.delay = delay

    def _feed(self, value):
        if self.delay:
            time.sleep(self.delay)
        if isinstance(value, Exception):
            raise value
        return value

    def fetch_wireless_networks(self) -> List[WirelessNetwork]:
        return self._feed(self.networks)

    def fetch_neighbor_table(self) -> List[str]:
        return self._feed(self.neighbors)

    def fetch_host_hints(self) -> HostHints:
        return self._feed(self.hints)

    def fetch_leases(self) -> List[Lease]:
        return self._feed(self.leases)

    def fetch_lease_config(self) -> LeaseConfig:
        return self._feed(self.lease_config)


