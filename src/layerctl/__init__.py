"""layerctl: resolve and diagnose layered, multi-scope agent configuration."""

__version__ = "0.1.0"
