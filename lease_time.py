# lease_time.py
import re
import logging
from typing import Dict, Iterable, Optional

from device import Lease
from errors import MalformedLeaseDuration
from utils import format_mac

logger = logging.getLogger(__name__)

LEASE_PATTERN = re.compile(r"^(\d+)(d|h|m)$")
MIN_LEASE_SECONDS = 120

def lease_to_seconds(text: str) -> int:
    """Converts a lease-time string such as '12h' into seconds.

    Raises:
        MalformedLeaseDuration: if the string is not ``<integer><d|h|m>``.
    """
    match = LEASE_PATTERN.match((text or "").strip().lower())
    if match is None:
        raise MalformedLeaseDuration(f"Unrecognised lease time: {text!r}")
    num, unit = int(match.group(1)), match.group(2)
    if num == 0:
        return MIN_LEASE_SECONDS
    if unit == "d":
        return num * 86400
    if unit == "h":
        return num * 3600
    return (2 if num <= 1 else num) * 60

def parse_lease_duration(text: Optional[str]) -> Optional[int]:
    """Like lease_to_seconds, but returns None for anything malformed."""
    if text is None:
        return None
    try:
        return lease_to_seconds(text)
    except MalformedLeaseDuration as err:
        logger.debug(f"{err}; falling back to network default")
        return None

def compute_online_duration(leases: Iterable[Lease], per_host_overrides: Dict[str, Optional[int]],
                            network_default_seconds: Optional[int]) -> Dict[str, int]:
    """Maps MAC -> seconds online, derived from lease duration minus time remaining.

    Leases that have already expired (remaining <= 0) are left out, as are
    hosts for which no lease duration is known at all.
    """
    online: Dict[str, int] = {}
    for lease in leases:
        if lease.expires_in_seconds <= 0:
            continue
        mac = format_mac(lease.mac)
        duration = per_host_overrides.get(mac)
        if duration is None:
            duration = network_default_seconds
        if duration is None:
            logger.debug(f"No lease duration known for {mac}")
            continue
        online[mac] = duration - lease.expires_in_seconds
    return online

def host_overrides(per_host: Dict[str, str]) -> Dict[str, Optional[int]]:
    """Parses per-host lease strings, keyed by canonical MAC."""
    return {format_mac(mac): parse_lease_duration(text) for mac, text in per_host.items()}

def format_duration(seconds: Optional[int]) -> str:
    """Renders seconds as '1d 2h 3m 4s', dropping empty leading units; '-' if unknown."""
    if seconds is None or seconds < 0:
        return "-"
    days, rest = divmod(int(seconds), 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    if days > 0:
        return f"{days}d {hours}h {minutes}m {secs}s"
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
