"""Demodulator signal processing blocks: carrier recovery, filtering, quantization."""

from __future__ import annotations

import math

import numpy as np

TWO_PI = 2 * math.pi

NTAPS = 31
_ROLLOFF = 0.5


def _as_samples(samples) -> np.ndarray:
    x = np.asarray(samples, dtype=np.complex64)
    if x.ndim != 1:
        raise ValueError("samples must be a one-dimensional sequence")
    return x


class Costas:
    """Costas loop that removes carrier phase and frequency offset.

    The loop updates once per block of four samples, so the number of
    samples passed to :meth:`process` must be a multiple of four.
    """

    def __init__(self, max_deviation: float = TWO_PI) -> None:
        damp = math.sqrt(2.0) / 2.0
        bw = 0.005
        denominator = 1.0 + 2.0 * damp * bw + bw * bw
        self.alpha = (4 * damp * bw) / denominator
        self.beta = (4 * bw * bw) / denominator
        self.phase = 0.0
        self.freq = 0.0
        # Maximum frequency deviation in radians per sample.
        self.max_deviation = float(max_deviation)

    @property
    def frequency(self) -> float:
        """Current frequency correction in radians per sample."""
        return self.freq

    def process(self, samples) -> np.ndarray:
        """Rotate ``samples`` by the tracked carrier and return the result."""
        x = _as_samples(samples)
        if len(x) % 4:
            raise ValueError("number of samples must be a multiple of 4")
        out = np.empty_like(x)
        offsets = np.arange(4, dtype=np.float64)
        for start in range(0, len(x), 4):
            phases = -(self.phase + offsets * self.freq)
            rotation = (np.cos(phases) + 1j * np.sin(phases)).astype(np.complex64)
            block = x[start:start + 4] * rotation
            out[start:start + 4] = block

            errors = np.clip(block.real.astype(np.float64) * block.imag, -1.0, 1.0)
            total_error = float(errors.mean())

            self.freq += self.beta * total_error
            self.phase += self.alpha * total_error + self.freq
            self.freq = min(max(self.freq, -self.max_deviation), self.max_deviation)

            if self.phase > TWO_PI or self.phase < -TWO_PI:
                self.phase = math.fmod(self.phase, TWO_PI)
        return out


def rrc_taps(sample_rate: int, symbol_rate: int) -> np.ndarray:
    """Root raised cosine taps (roll-off 0.5), normalized to sum to one."""
    sps = sample_rate / symbol_rate
    beta = _ROLLOFF
    r = 1 / sps
    taps = np.empty(NTAPS, dtype=np.float32)
    for i in range(NTAPS):
        t = i - NTAPS // 2
        z = t / sps

        if t == 0:
            taps[i] = r * (1.0 + (4 * beta / math.pi) - beta)
            continue

        tmp = 4 * beta * z
        tmp = 1 - tmp * tmp
        if abs(tmp * tmp) < 1e-5:
            t1 = 1 + 2 / math.pi
            t2 = float(np.sin(np.float32(math.pi / (4 * beta))))
            t3 = 1 - 2 / math.pi
            t4 = float(np.cos(np.float32(math.pi / (4 * beta))))
            taps[i] = r * beta / float(np.sqrt(np.float32(2.0))) * (t1 * t2 + t3 * t4)
            continue

        t1 = float(np.sin(np.float32(math.pi * z * (1 - beta))))
        t2 = float(np.cos(np.float32(math.pi * z * (1 + beta))))
        t3 = 4 * beta * z
        t4 = 1 / (math.pi * z * (1 - (16 * beta * beta * z * z)))
        taps[i] = r * t4 * (t1 + t2 * t3)

    total = float(np.sum(taps, dtype=np.float64))
    return (taps / total).astype(np.float32)


class RRC:
    """Root raised cosine matched filter with decimation.

    A delay line of NTAPS samples carries over between calls, so a signal
    may be processed in chunks.
    """

    def __init__(self, decimation: int, sample_rate: int, symbol_rate: int) -> None:
        if decimation < 1:
            raise ValueError("decimation must be at least 1")
        self.decimation = decimation
        # A trailing zero tap makes the filter length a multiple of four.
        self.taps = np.append(rrc_taps(sample_rate, symbol_rate), np.float32(0.0))
        self._delay = np.zeros(NTAPS, dtype=np.complex64)

    def process(self, samples) -> np.ndarray:
        """Filter and decimate ``samples``; the length must divide evenly."""
        x = _as_samples(samples)
        if len(x) % self.decimation:
            raise ValueError("number of samples must be a multiple of the decimation")
        buf = np.concatenate([self._delay, x])
        count = len(x) // self.decimation
        windows = np.lib.stride_tricks.sliding_window_view(buf, NTAPS + 1)
        out = (windows[::self.decimation][:count] @ self.taps).astype(np.complex64)
        self._delay = buf[-NTAPS:].copy()
        return out


def quantize(samples) -> np.ndarray:
    """Convert the in-phase part of each sample to a signed 8-bit soft bit."""
    x = _as_samples(samples)
    values = np.trunc(x.real.astype(np.float64) * 127.0)
    return np.clip(values, -128, 127).astype(np.int8)


def scale_samples(samples) -> bytes:
    """Scale samples to interleaved signed 8-bit I/Q pairs, clamped to ±127."""
    x = _as_samples(samples)
    pairs = np.empty((len(x), 2), dtype=np.float64)
    pairs[:, 0] = x.real
    pairs[:, 1] = x.imag
    pairs = np.trunc(np.clip(pairs * 127.0, -127.0, 127.0))
    return pairs.astype(np.int8).tobytes()