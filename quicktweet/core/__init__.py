"""
Core utilities shared across the QuickTweet backend.

This package hosts configuration helpers (env vars, feature flags) and
cross-cutting services such as logging and password hashing. Services and
routers depend on these primitives instead of reading os.environ directly.
"""
