"""Engine support: YAML-backed progression settings."""
