"""
Persistence adapters.

Services depend on the repository instead of issuing queries themselves; the
repository is bound to the session of the unit of work that is running.
"""
