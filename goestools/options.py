"""Command-line options of the receiver."""

from __future__ import annotations

import getopt
import os
import re
import stat
import sys
from dataclasses import dataclass
from datetime import timedelta

PROG = "goesrecv"

_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_USAGE = """\
Usage: {prog} [OPTIONS]
Demodulate and decode signal into packet stream.

Options:
  -c, --config PATH          Path to configuration file
  -v, --verbose              Periodically show statistics
  -i, --interval SEC         Interval for --verbose

Other:
      --help     Display this help and exit
      --version  Print version information and exit
"""


@dataclass
class Options:
    config: str = ""
    verbose: bool = False
    interval: timedelta = timedelta(0)


def _seconds(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group()) if match else 0.0


def _fail(message: str) -> SystemExit:
    print(message, file=sys.stderr)
    print(f"Try '{PROG} --help' for more information.", file=sys.stderr)
    return SystemExit(1)


def parse_options(argv: list[str] | None = None) -> Options:
    """Parse the arguments (without the program name) into Options.

    Exits with status 0 after --help or --version, and with status 1 for
    an invalid option or a missing or unusable configuration file.
    """
    if argv is None:
        argv = sys.argv[1:]
    try:
        pairs, _ = getopt.gnu_getopt(
            argv, "c:vi:", ["config=", "verbose", "interval=", "help", "version"]
        )
    except getopt.GetoptError as exc:
        print(exc, file=sys.stderr)
        print("Invalid option", file=sys.stderr)
        raise SystemExit(1) from None

    opts = Options()
    for flag, value in pairs:
        if flag in ("-c", "--config"):
            opts.config = value
        elif flag in ("-v", "--verbose"):
            opts.verbose = True
        elif flag in ("-i", "--interval"):
            opts.interval = timedelta(milliseconds=int(1000 * _seconds(value)))
        elif flag == "--help":
            sys.stderr.write(_USAGE.format(prog=PROG) + "\n")
            raise SystemExit(0)
        elif flag == "--version":
            print(f"{PROG}\n\nPart of goestools")
            raise SystemExit(0)

    if not opts.config:
        raise _fail(f"{PROG}: no configuration file specified")

    error = None
    try:
        if not stat.S_ISREG(os.stat(opts.config).st_mode):
            error = "Not a file"
    except OSError as exc:
        error = exc.strerror
    if error is not None:
        raise _fail(f"{PROG}: invalid configuration file '{opts.config}': {error}")

    if opts.verbose and opts.interval == timedelta(0):
        opts.interval = timedelta(seconds=1)
    return opts