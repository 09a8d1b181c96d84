from __future__ import annotations

import pytest

from fleettrack.ingestion.telematics import TelematicsReader
from fleettrack.models.capability import TempMode
from fleettrack.tracking.temperature import (
    resolve_channel,
    resolve_reefer_details,
    resolve_reefer_display,
    resolve_temperature,
)
from helpers import live_state


class TestChannel:
    @pytest.mark.parametrize("value", [-60.0, 0.0, 130.0])
    def test_range_bounds_are_inclusive(self, value: float) -> None:
        channel = resolve_channel(value)
        assert not channel.has_error
        assert channel.display == f"{value:.1f}°C"

    @pytest.mark.parametrize("value", [-60.1, 130.1, 999.0])
    def test_out_of_range_is_error(self, value: float) -> None:
        channel = resolve_channel(value, "0")
        assert channel.has_error
        assert channel.display == "--"

    def test_missing_value_with_fault_code(self) -> None:
        channel = resolve_channel(None, "E7")
        assert channel.has_error
        assert channel.display == "--"

    @pytest.mark.parametrize("code", ["0", "OK", " none ", "No_Error"])
    def test_missing_value_with_ok_code(self, code: str) -> None:
        channel = resolve_channel(None, code)
        assert not channel.has_error
        assert channel.display == "--"

    def test_nothing_reported_is_error(self) -> None:
        channel = resolve_channel(None, None)
        assert channel.has_error
        assert channel.display == "--"


def test_none_mode_skips_resolution() -> None:
    snapshot = live_state(temp_1_c=500)
    reading = resolve_temperature(snapshot, TempMode.NONE)
    assert reading.display == "-"
    assert not reading.has_error


def test_never_reported_ignores_cached_reading() -> None:
    snapshot = live_state(age_s=None, temp_1_c=-18)
    reading = resolve_temperature(snapshot, TempMode.SINGLE)
    assert reading.display == "-"
    assert not reading.has_error
    assert resolve_temperature(None, TempMode.MULTI).display == "-"


def test_structured_column_beats_telematics() -> None:
    snapshot = live_state(temp_1_c=-18.25, telematics={"temp1": 4})
    reading = resolve_temperature(snapshot, TempMode.SINGLE)
    assert reading.display == "-18.2°C"
    assert reading.channel_1 is not None and reading.channel_1.value_c == -18.25


def test_temperature_c_column_feeds_channel_one() -> None:
    reading = resolve_temperature(live_state(temperature_c=3), TempMode.SINGLE)
    assert reading.display == "3.0°C"


def test_telematics_alias_fallback() -> None:
    snapshot = live_state(telematics={"temp1": "--", "temp_ch1": "-5.55"})
    assert resolve_temperature(snapshot, TempMode.SINGLE).display == "-5.5°C"


def test_single_silent_probe_is_error() -> None:
    reading = resolve_temperature(live_state(), TempMode.SINGLE)
    assert reading.display == "--"
    assert reading.has_error
    assert reading.channel_2 is None


def test_multi_channels_resolve_independently() -> None:
    snapshot = live_state(temp_1_c=-20, telematics={"sensor_2_error_code": "E3"})
    reading = resolve_temperature(snapshot, TempMode.MULTI)
    assert reading.display == "-20.0°C | --"
    assert reading.has_error
    assert reading.channel_1 is not None and not reading.channel_1.has_error
    assert reading.channel_2 is not None and reading.channel_2.has_error


def test_multi_all_good() -> None:
    snapshot = live_state(temp_1_c=-20, temp_2_c=2)
    reading = resolve_temperature(snapshot, TempMode.MULTI)
    assert reading.display == "-20.0°C | 2.0°C"
    assert not reading.has_error


class TestReefer:
    def test_display(self) -> None:
        display = resolve_reefer_display(TelematicsReader({"reefer_mode": "Continuo", "setpoint": "-18"}))
        assert display.mode == "Continuo"
        assert display.setpoint == "-18°C"

    def test_display_missing(self) -> None:
        display = resolve_reefer_display(TelematicsReader({}))
        assert display.mode == "-"
        assert display.setpoint == "-"

    def test_details_require_can(self) -> None:
        reader = TelematicsReader({"fuel_level": "64", "battery_voltage": 12.7, "return_air": -17.5})
        assert resolve_reefer_details(reader, has_can=False) is None
        details = resolve_reefer_details(reader, has_can=True)
        assert details is not None
        assert details.fuel_level_pct == 64.0
        assert details.battery_voltage == 12.7
        assert details.return_air_c == -17.5
        assert details.discharge_air_c is None
