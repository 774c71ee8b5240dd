"""Infrastructure layer: scope discovery and layer file loading.

This layer touches the filesystem and parses YAML (ruamel.yaml). The
domain layer never imports from here; services bridge the two.
"""
