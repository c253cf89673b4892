"""Bundled providers. Each module exposes ``register(registry)``."""
