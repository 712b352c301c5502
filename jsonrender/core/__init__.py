"""Configuration models, settings and batch results."""
