"""sidenote: side annotations over live text spans, persisted in a sidecar file."""

__version__ = "0.1.0"
