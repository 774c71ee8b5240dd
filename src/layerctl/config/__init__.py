"""Configuration: ``layerctl.toml`` models, settings, discovery, and logging."""
