


import pytest
from device import HostHints, RateInfo, StationRecord
from errors import FeedUnavailable



@pytest.fixture
def station():
    return StationRecord(
        mac="AA:BB:CC:DD:EE:01",
        signal=-45,
        noise=-95,
        connected_time=754,
        rx=RateInfo(rate=866700, mhz=80, vht=True, mcs=9, nss=2, short_gi=True),
        tx=RateInfo(rate=780000, mhz=80, vht=True, mcs=8, nss=2),
    )


@pytest.fixture
def hints():
    return HostHints({
        "AA:BB:CC:DD:EE:01": {"name": "phone", "ipaddrs": ["192.168.1.10"], "ip6addrs": ["fd00::10"]},
        "AA:BB:CC:DD:EE:02": {"name": "desktop", "ipaddrs": ["192.168.1.20"]},
    })


@pytest.fixture
def unavailable():
    return FeedUnavailable("router unreachable")
