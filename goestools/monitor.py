"""Aggregation of demodulator and decoder statistics."""

from __future__ import annotations

import json
import math
import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from .statsd import DatagramSocket

INPROC_PREFIX = "inproc://"

# Upper bound on packets per second (HRIT).
_MAX_PACKETS_PER_SECOND = 60


def find_inproc_endpoint(endpoints: Iterable[str]) -> str | None:
    """Return the first in-process endpoint, or None if there is none."""
    return next((e for e in endpoints if e.startswith(INPROC_PREFIX)), None)


@dataclass
class Stats:
    """Statistics accumulated over one reporting interval."""

    gain: list[float] = field(default_factory=list)
    frequency: list[float] = field(default_factory=list)
    omega: list[float] = field(default_factory=list)
    viterbi_errors: list[int] = field(default_factory=list)
    reed_solomon_errors: list[int] = field(default_factory=list)
    total_ok: int = 0
    total_dropped: int = 0


def _float_avg(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _int_avg(values: list[int]) -> int:
    return int(sum(values) / len(values)) if values else 0


def _number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected {key!r} to be a number")
    return float(value)


def _integer(key: str, value: Any) -> int:
    return int(_number(key, value))


class Monitor:
    """Collects stats messages, forwards them to statsd and summarizes them."""

    def __init__(
        self,
        verbose: bool = False,
        interval: timedelta = timedelta(seconds=1),
        statsd: DatagramSocket | None = None,
    ) -> None:
        self.verbose = verbose
        self.interval = interval
        self.statsd = statsd
        self.stats = Stats()
        self.demodulator_endpoint: str | None = None
        self.decoder_endpoint: str | None = None

    def initialize(self, config) -> None:
        """Pick the stats endpoints and statsd address from ``config``."""
        demod = find_inproc_endpoint(config.demodulator.stats_publisher.bind)
        if demod is None:
            raise RuntimeError("no demodulator stats endpoint")
        decoder = find_inproc_endpoint(config.decoder.stats_publisher.bind)
        if decoder is None:
            raise RuntimeError("no decoder stats endpoint")
        self.demodulator_endpoint = demod
        self.decoder_endpoint = decoder
        if config.monitor.statsd_address:
            self.statsd = DatagramSocket(config.monitor.statsd_address)

    def process(self, payload: str | bytes) -> str:
        """Record one JSON stats message and return its statsd payload.

        The payload is also sent to the statsd socket when one is set.
        """
        data = json.loads(payload)
        if not isinstance(data, dict):
            raise ValueError("stats message must be a JSON object")

        lines: list[str] = []
        stats = self.stats
        for key in sorted(data):
            value = data[key]
            if key == "gain":
                v = _number(key, value)
                stats.gain.append(v)
                lines.append(f"{key}:{v:g}|g")
            elif key == "frequency":
                v = _number(key, value)
                stats.frequency.append(v)
                # Reset to 0 first so negative gauge values are taken as-is.
                lines.append(f"{key}:0|g")
                lines.append(f"{key}:{v:g}|g")
            elif key == "omega":
                v = _number(key, value)
                stats.omega.append(v)
                lines.append(f"{key}:{v:g}|g")
            elif key == "viterbi_errors":
                v = _integer(key, value)
                stats.viterbi_errors.append(v)
                lines.append(f"{key}:{v}|h")
            elif key == "reed_solomon_errors":
                v = _integer(key, value)
                if v >= 0:
                    stats.reed_solomon_errors.append(v)
                    lines.append(f"{key}:{v}|h")
            elif key == "ok":
                if _integer(key, value) != 0:
                    stats.total_ok += 1
                    lines.append("packets_ok:1|c")
                    lines.append("packets_dropped:0|c")
                else:
                    stats.total_dropped += 1
                    lines.append("packets_ok:0|c")
                    lines.append("packets_dropped:1|c")

        text = "".join(line + "\n" for line in lines)
        if self.statsd is not None:
            self.statsd.send(text)
        return text

    def take_stats(self) -> Stats:
        """Return the stats gathered so far and start a fresh interval."""
        stats, self.stats = self.stats, Stats()
        return stats

    def format_stats(self, stats: Stats, now: datetime | None = None) -> str:
        """Format one summary line for ``stats`` at time ``now`` (UTC)."""
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is not None:
            now = now.astimezone(timezone.utc)

        seconds = int(self.interval.total_seconds())
        if seconds > 0:
            width = math.ceil(math.log10(seconds * _MAX_PACKETS_PER_SECOND))
        else:
            width = 0

        return (
            f"{now:%Y-%m-%dT%H:%M:%SZ} [monitor] "
            f"gain: {_float_avg(stats.gain):5.2f}, "
            f"freq: {_float_avg(stats.frequency):7.1f}, "
            f"omega: {_float_avg(stats.omega):5.3f}, "
            f"vit(avg): {_int_avg(stats.viterbi_errors):4d}, "
            f"rs(sum): {sum(stats.reed_solomon_errors):4d}, "
            f"packets: {stats.total_ok:{width}d}, "
            f"drops: {stats.total_dropped:{width}d}"
        )

    def report(self, now: datetime | None = None) -> Stats:
        """End the current interval, printing its summary when verbose."""
        stats = self.take_stats()
        if self.verbose:
            print(self.format_stats(stats, now), file=sys.stdout, flush=True)
        return stats

    def close(self) -> None:
        if self.statsd is not None:
            self.statsd.close()
            self.statsd = None