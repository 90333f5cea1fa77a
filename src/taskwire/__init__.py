"""taskwire: line-delimited JSON capability server over a remote task store."""

__version__ = "1.0.0"
