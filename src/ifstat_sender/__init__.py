"""Realtime interface statistics sender.

Samples per-interface byte/packet counters, derives rates and peaks, and
publishes one JSON snapshot per cycle over ZeroMQ.
"""

__version__ = "0.1.0"
