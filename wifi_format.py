# wifi_format.py
from typing import Optional, Union

from device import RateInfo

SIGNAL_ICONS = (
    "signal-0.png",
    "signal-0-25.png",
    "signal-25-50.png",
    "signal-50-75.png",
    "signal-75-100.png",
)

def classify_protocol_generation(rx: RateInfo, tx: RateInfo) -> str:
    """Returns the highest Wi-Fi generation flagged in either direction."""
    if rx.he or tx.he:
        return "Wi-Fi 6"
    if rx.vht or tx.vht:
        return "Wi-Fi 5"
    if rx.ht or tx.ht:
        return "Wi-Fi 4"
    return ""

def format_frequency_band(freq: Union[str, float, int, None]) -> str:
    """'2.437' / '2437' -> '2.4G', '5.18' / '5180' -> '5G'; other values unchanged."""
    if not freq:
        return ""
    freq = str(freq)
    if freq.startswith("2"):
        return "2.4G"
    if freq.startswith("5"):
        return "5G"
    return freq

def _format_rate_value(kbits: int) -> str:
    return f"{kbits / 1000:.3f}".rstrip("0").rstrip(".")

def format_rate_descriptor(info: RateInfo) -> str:
    """Human-readable rate line, e.g. '866.7 Mbit/s, 80 MHz, MCS: 9, NSS: 2, Short GI'."""
    s = f"{_format_rate_value(info.rate)} Mbit/s, {info.mhz} MHz"
    if info.ht or info.vht or info.he:
        s += f", MCS: {info.mcs}"
        if info.nss:
            s += f", NSS: {info.nss}"
        if info.short_gi:
            s += ", Short\xa0GI"
        if info.he_gi:
            s += f", HE-GI {info.he_gi}"
        if info.he_dcm:
            s += f", HE-DCM {info.he_dcm}"
    return s

def signal_quality(signal_dbm: float) -> float:
    return min(((signal_dbm + 110) / 70) * 100, 100)

def classify_signal_icon(signal_dbm: float) -> str:
    """Buckets a signal level into one of five icon identifiers."""
    q = signal_quality(signal_dbm)
    if q == 0:
        return SIGNAL_ICONS[0]
    if q < 25:
        return SIGNAL_ICONS[1]
    if q < 50:
        return SIGNAL_ICONS[2]
    if q < 75:
        return SIGNAL_ICONS[3]
    return SIGNAL_ICONS[4]

def format_signal(signal: int, noise: Optional[int] = None) -> str:
    return f"{signal}/{noise}dBm" if noise else f"{signal}dBm"
