import pytest

from device import RateInfo
from wifi_format import (SIGNAL_ICONS, classify_protocol_generation, classify_signal_icon,
                         format_frequency_band, format_rate_descriptor, format_signal)


def test_protocol_generation_highest_wins():
    assert classify_protocol_generation(RateInfo(he=True), RateInfo(he=False)) == "Wi-Fi 6"
    assert classify_protocol_generation(RateInfo(he=True, vht=True, ht=True), RateInfo(ht=True)) == "Wi-Fi 6"
    assert classify_protocol_generation(RateInfo(ht=True), RateInfo(he=True)) == "Wi-Fi 6"


def test_protocol_generation_lower_tiers():
    assert classify_protocol_generation(RateInfo(ht=True), RateInfo(vht=True)) == "Wi-Fi 5"
    assert classify_protocol_generation(RateInfo(), RateInfo(ht=True)) == "Wi-Fi 4"
    assert classify_protocol_generation(RateInfo(), RateInfo()) == ""


@pytest.mark.parametrize("freq, expected", [
    ("2.437", "2.4G"),
    ("2412", "2.4G"),
    ("5.18", "5G"),
    (5745, "5G"),
    ("6.115", "6.115"),
    ("", ""),
    (None, ""),
])
def test_format_frequency_band(freq, expected):
    assert format_frequency_band(freq) == expected


def test_rate_descriptor_legacy_rate_has_no_mcs():
    assert format_rate_descriptor(RateInfo(rate=54000, mhz=20, mcs=7)) == "54 Mbit/s, 20 MHz"


def test_rate_descriptor_vht_fields_in_order():
    info = RateInfo(rate=866700, mhz=80, vht=True, mcs=9, nss=2, short_gi=True)
    assert format_rate_descriptor(info) == "866.7 Mbit/s, 80 MHz, MCS: 9, NSS: 2, Short\xa0GI"


def test_rate_descriptor_he_markers():
    info = RateInfo(rate=1201000, mhz=80, he=True, mcs=11, nss=2, he_gi=1, he_dcm=1)
    assert format_rate_descriptor(info) == "1201 Mbit/s, 80 MHz, MCS: 11, NSS: 2, HE-GI 1, HE-DCM 1"


def test_rate_descriptor_skips_falsy_optional_fields():
    info = RateInfo(rate=144400, mhz=20, ht=True, mcs=15, nss=0, he_gi=0)
    assert format_rate_descriptor(info) == "144.4 Mbit/s, 20 MHz, MCS: 15"


@pytest.mark.parametrize("signal, icon", [
    (-110, SIGNAL_ICONS[0]),
    (-100, SIGNAL_ICONS[1]),
    (-80, SIGNAL_ICONS[2]),
    (-65, SIGNAL_ICONS[3]),
    (-45, SIGNAL_ICONS[4]),
    (-20, SIGNAL_ICONS[4]),
])
def test_classify_signal_icon(signal, icon):
    assert classify_signal_icon(signal) == icon


def test_format_signal():
    assert format_signal(-45, -95) == "-45/-95dBm"
    assert format_signal(-45) == "-45dBm"


def test_rate_descriptor_keeps_full_precision():
    assert format_rate_descriptor(RateInfo(rate=2882353, mhz=160)) == "2882.353 Mbit/s, 160 MHz"
    assert format_rate_descriptor(RateInfo(rate=6000, mhz=20)) == "6 Mbit/s, 20 MHz"
