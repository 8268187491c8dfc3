"""Building blocks for peer-to-peer overlays: configuration, UDP transport, peer sets, scheduling, peer sampling and topology."""

__version__ = "0.1.0"