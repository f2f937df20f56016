"""Building blocks for GOES LRIT/HRIT reception: header parsing, DSP, configuration and monitoring."""

__version__ = "0.1.0"