"""State layer.

Single source of truth for fetched marketplace entities: the normalized
store, reference resolution, and the caller-side query state kept next to
it.
"""
