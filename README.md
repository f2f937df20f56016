# goestools

Building blocks for receiving LRIT and HRIT transmissions from GOES weather
satellites. The package provides:

- `goestools.lrit`: parsing of LRIT headers from a byte buffer
- `goestools.dsp`: demodulator blocks on NumPy arrays (Costas loop,
  root-raised-cosine filter, soft-bit quantization, 8-bit sample scaling)
- `goestools.config`: loading and checking of the receiver's TOML configuration
- `goestools.options`: parsing of the receiver's command-line options
- `goestools.monitor` and `goestools.statsd`: aggregation of demodulator and
  decoder statistics, with forwarding to statsd over UDP
- small helpers: `goestools.fs.mkdirp`, `goestools.dirs.match_files` and
  `goestools.timer.Timer`

## Installation

```
pip install goestools
```

Python 3.11 or later is required. NumPy is the only runtime dependency.

## LRIT headers

`get_header_map(buf)` takes the bytes of an LRIT file's header section and
returns a dict from header type code to byte offset, ordered by code. It
returns an empty dict when it meets a header of length zero, and raises
`HeaderError` (a `ValueError`) when the primary header is wrong or the buffer
is truncated.

```python
from goestools import lrit

header_map = lrit.get_header_map(buf)
if lrit.has_header(header_map, lrit.TimeStampHeader):
    ts = lrit.get_header(buf, header_map, lrit.TimeStampHeader)
    print(ts.time_long())        # "YYYY-MM-DD HH:MM:SS", UTC
    print(ts.unix().seconds)
if lrit.has_header(header_map, lrit.ImageNavigationHeader):
    nav = lrit.get_header(buf, header_map, lrit.ImageNavigationHeader)
    print(nav.longitude())       # number in parentheses in the projection name
```

Header classes are frozen dataclasses, each with a `CODE`: `PrimaryHeader`,
`ImageStructureHeader`, `ImageNavigationHeader`, `ImageDataFunctionHeader`,
`AnnotationHeader`, `TimeStampHeader`, `AncillaryTextHeader`, `KeyHeader`,
`SegmentIdentificationHeader`, `NOAALRITHeader`,
`HeaderStructureRecordHeader`, `RiceCompressionHeader` and
`DCSFileNameHeader`. `read_header(buf, header_class, pos)` parses one header
at a given offset; `get_header` raises `HeaderError` when the header is absent.

## DSP blocks

```python
import numpy as np
from goestools.dsp import Costas, RRC, quantize, rrc_taps, scale_samples

taps = rrc_taps(2_400_000, 293_883)          # 31 float32 taps summing to one
rrc = RRC(1, 2_400_000, 293_883)
costas = Costas()

samples = np.zeros(1024, dtype=np.complex64)
filtered = rrc.process(costas.process(samples))
bits = quantize(filtered)                    # int8 soft bits from the real part
payload = scale_samples(filtered)            # interleaved int8 I/Q bytes
```

`Costas.process` needs a multiple of four samples and updates its loop once per
block of four; `Costas.frequency` is the correction in radians per sample.
`RRC.process` keeps a delay line between calls, so a signal may be fed in
chunks whose length is a multiple of the decimation.

## Configuration and options

```python
from goestools.config import Config

config = Config.load("goesrecv.conf")
```

Unknown sections or keys, wrongly typed values, a publisher section without
`bind`, a non-positive `costas.max_deviation` and a `nanomsg` section without
`sample_rate` raise `ValueError`. In-process endpoints
`inproc://demodulator_stats` and `inproc://decoder_stats` are always appended
to the stats publishers. With demodulator mode `lrit` or `hrit`, the Airspy
and RTL-SDR frequencies default to 1691 MHz or 1694.1 MHz unless set.
`Config.from_dict` does the same for already parsed data.

`goestools.options.parse_options(argv)` handles `-c/--config`, `-v/--verbose`,
`-i/--interval`, `--help` and `--version`, and returns an `Options`. It exits
with status 1 when no configuration file is given or it is not a regular file;
with `--verbose` and no interval, the interval is one second.

## Monitoring

```python
from datetime import timedelta
from goestools.monitor import Monitor
from goestools.statsd import DatagramSocket

monitor = Monitor(verbose=True, interval=timedelta(seconds=1),
                  statsd=DatagramSocket("udp4://localhost:8125"))
monitor.process('{"gain": 2.5, "frequency": -120.0, "ok": 1}')
monitor.report()   # prints a summary line and starts a new interval
monitor.close()
```

`Monitor.process` records one JSON stats message and returns the statsd
payload it sent. `take_stats` and `format_stats` give access to the
interval's `Stats` and its summary line; `Monitor.initialize(config)` picks
the in-process endpoints and the statsd address from a `Config`.
`statsd.parse_address` splits `[udp4|udp6://][host][:port]`, defaulting to
`localhost` and port `8125`.

## What this package does not do

It does not talk to radio hardware, does not run a receiver pipeline, and has
no messaging transport: `Monitor` is given stats messages by its caller and
only records the endpoint names. There are no command-line programs, and no
readers for whole LRIT files on disk, no JSON export of headers, no ZIP
extraction and no packet stream reading or writing.