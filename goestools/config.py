"""Receiver configuration loaded from a TOML file."""

from __future__ import annotations

import struct
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

DEMODULATOR_STATS_ENDPOINT = "inproc://demodulator_stats"
DECODER_STATS_ENDPOINT = "inproc://decoder_stats"

LRIT_FREQUENCY = 1691000000
HRIT_FREQUENCY = 1694100000


def _float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def _invalid_key(key: str) -> ValueError:
    return ValueError(f"Invalid configuration key: {key}")


def _type_error(key: str, expected: str, value: Any) -> ValueError:
    return ValueError(
        f"Expected {key!r} to be {expected}, got {type(value).__name__}"
    )


def _int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _type_error(key, "an integer", value)
    return value


def _uint32(key: str, value: Any) -> int:
    return _int(key, value) & 0xFFFFFFFF


def _uint8(key: str, value: Any) -> int:
    return _int(key, value) & 0xFF


def _float(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _type_error(key, "a number", value)
    return float(value)


def _single(key: str, value: Any) -> float:
    return _float32(_float(key, value))


def _str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise _type_error(key, "a string", value)
    return value


def _bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise _type_error(key, "a boolean", value)
    return value


def _table(key: str, value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise _type_error(key, "a table", value)
    return value


def _bind(key: str, value: Any) -> str:
    table = _table(key, value)
    if "bind" not in table:
        raise ValueError('Expected publisher section to have "bind" key')
    return _str("bind", table["bind"])


@dataclass
class PublisherConfig:
    """Endpoint a publisher binds to and its optional send buffer size."""

    bind: str
    send_buffer: int | None = None

    @classmethod
    def _from_value(cls, key: str, value: Any) -> PublisherConfig:
        bind = _bind(key, value)
        table = _table(key, value)
        send_buffer = None
        if "send_buffer" in table:
            send_buffer = _int("send_buffer", table["send_buffer"])
        return cls(bind, send_buffer)


@dataclass
class StatsPublisherConfig:
    """Endpoints for a statistics publisher.

    Several endpoints are kept because an in-process endpoint for the
    monitor is always added.
    """

    bind: list[str] = field(default_factory=list)
    send_buffer: int = 0

    @classmethod
    def _from_value(cls, key: str, value: Any) -> StatsPublisherConfig:
        bind = _bind(key, value)
        table = _table(key, value)
        out = cls([bind])
        if "send_buffer" in table:
            out.send_buffer = _int("send_buffer", table["send_buffer"])
        return out


def _publisher(key: str, value: Any) -> PublisherConfig:
    return PublisherConfig._from_value(key, value)


def _stats_publisher(key: str, value: Any) -> StatsPublisherConfig:
    return StatsPublisherConfig._from_value(key, value)


def _max_deviation(key: str, value: Any) -> int:
    deviation = int(_float(key, value))
    if deviation <= 0:
        raise ValueError("Expected 'max_deviation' to be positive")
    return deviation


_Fields = dict[str, tuple[str, Callable[[str, Any], Any]]]


def _load_section(target: Any, key: str, value: Any, fields: _Fields) -> None:
    table = _table(key, value)
    for name in sorted(table):
        try:
            attr, convert = fields[name]
        except KeyError:
            raise _invalid_key(name) from None
        setattr(target, attr, convert(name, table[name]))


@dataclass
class DemodulatorConfig:
    downlink_type: str = ""
    source: str = ""
    stats_publisher: StatsPublisherConfig = field(default_factory=StatsPublisherConfig)
    decimation: int = 1

    _FIELDS = {
        "mode": ("downlink_type", _str),
        "source": ("source", _str),
        "stats_publisher": ("stats_publisher", _stats_publisher),
        "decimation": ("decimation", _int),
    }


@dataclass
class AirspyConfig:
    frequency: int = 0
    sample_rate: int = 0
    gain: int = 18
    bias_tee: bool = False
    sample_publisher: PublisherConfig | None = None

    _FIELDS = {
        "frequency": ("frequency", _uint32),
        "sample_rate": ("sample_rate", _uint32),
        "gain": ("gain", _uint8),
        "sample_publisher": ("sample_publisher", _publisher),
        "bias_tee": ("bias_tee", _bool),
    }


@dataclass
class RTLSDRConfig:
    frequency: int = 0
    sample_rate: int = 0
    gain: int = 30
    bias_tee: bool = False
    device_index: int = 0
    sample_publisher: PublisherConfig | None = None

    _FIELDS = {
        "frequency": ("frequency", _uint32),
        "sample_rate": ("sample_rate", _uint32),
        "gain": ("gain", _uint8),
        "sample_publisher": ("sample_publisher", _publisher),
        "bias_tee": ("bias_tee", _bool),
        "device_index": ("device_index", _uint32),
    }


@dataclass
class NanomsgConfig:
    sample_rate: int = 0
    connect: str = ""
    receive_buffer: int = 0
    sample_publisher: PublisherConfig | None = None

    _FIELDS = {
        "sample_rate": ("sample_rate", _uint32),
        "connect": ("connect", _str),
        "receive_buffer": ("receive_buffer", _int),
        "sample_publisher": ("sample_publisher", _publisher),
    }


@dataclass
class AGCConfig:
    min: float = _float32(1e-6)
    max: float = _float32(1e6)
    sample_publisher: PublisherConfig | None = None

    _FIELDS = {
        "min": ("min", _single),
        "max": ("max", _single),
        "sample_publisher": ("sample_publisher", _publisher),
    }


@dataclass
class CostasConfig:
    # Maximum frequency deviation in Hz.
    max_deviation: int = 20000
    sample_publisher: PublisherConfig | None = None

    _FIELDS = {
        "max_deviation": ("max_deviation", _max_deviation),
        "sample_publisher": ("sample_publisher", _publisher),
    }


@dataclass
class RRCConfig:
    sample_publisher: PublisherConfig | None = None

    _FIELDS = {"sample_publisher": ("sample_publisher", _publisher)}


@dataclass
class ClockRecoveryConfig:
    sample_publisher: PublisherConfig | None = None

    _FIELDS = {"sample_publisher": ("sample_publisher", _publisher)}


@dataclass
class QuantizationConfig:
    soft_bit_publisher: PublisherConfig | None = None

    _FIELDS = {"soft_bit_publisher": ("soft_bit_publisher", _publisher)}


@dataclass
class DecoderConfig:
    packet_publisher: PublisherConfig | None = None
    stats_publisher: StatsPublisherConfig = field(default_factory=StatsPublisherConfig)

    _FIELDS = {
        "packet_publisher": ("packet_publisher", _publisher),
        "stats_publisher": ("stats_publisher", _stats_publisher),
    }


@dataclass
class MonitorConfig:
    # Address for UDP statsd packets, e.g. localhost:8125.
    statsd_address: str = ""

    _FIELDS = {"statsd_address": ("statsd_address", _str)}


_SECTIONS = {
    "demodulator": "demodulator",
    "airspy": "airspy",
    "rtlsdr": "rtlsdr",
    "nanomsg": "nanomsg",
    "agc": "agc",
    "costas": "costas",
    "rrc": "rrc",
    "clock_recovery": "clock_recovery",
    "quantization": "quantization",
    "decoder": "decoder",
    "monitor": "monitor",
}


@dataclass
class Config:
    """Complete receiver configuration."""

    demodulator: DemodulatorConfig = field(default_factory=DemodulatorConfig)
    airspy: AirspyConfig = field(default_factory=AirspyConfig)
    rtlsdr: RTLSDRConfig = field(default_factory=RTLSDRConfig)
    nanomsg: NanomsgConfig = field(default_factory=NanomsgConfig)
    agc: AGCConfig = field(default_factory=AGCConfig)
    costas: CostasConfig = field(default_factory=CostasConfig)
    rrc: RRCConfig = field(default_factory=RRCConfig)
    clock_recovery: ClockRecoveryConfig = field(default_factory=ClockRecoveryConfig)
    quantization: QuantizationConfig = field(default_factory=QuantizationConfig)
    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)

    @classmethod
    def load(cls, path) -> Config:
        """Load a configuration from the TOML file at ``path``.

        Raises ValueError for malformed TOML or invalid settings.
        """
        with open(path, "rb") as fh:
            try:
                data = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                raise ValueError(str(exc)) from exc
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Build a configuration from already parsed TOML data."""
        out = cls()
        for key in sorted(data):
            try:
                attr = _SECTIONS[key]
            except KeyError:
                raise _invalid_key(key) from None
            section = getattr(out, attr)
            _load_section(section, key, data[key], section._FIELDS)
            if key == "nanomsg" and out.nanomsg.sample_rate == 0:
                raise ValueError("Key not set: sample_rate")

        out.demodulator.stats_publisher.bind.append(DEMODULATOR_STATS_ENDPOINT)
        out.decoder.stats_publisher.bind.append(DECODER_STATS_ENDPOINT)

        defaults = {"lrit": LRIT_FREQUENCY, "hrit": HRIT_FREQUENCY}
        frequency = defaults.get(out.demodulator.downlink_type)
        if frequency is not None:
            if out.airspy.frequency == 0:
                out.airspy.frequency = frequency
            if out.rtlsdr.frequency == 0:
                out.rtlsdr.frequency = frequency
        return out