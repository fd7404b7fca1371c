"""
FastAPI routers grouped by domain (users, friends, admin).

Routers are the boundary layer: they resolve the caller, strip quoting
artifacts from identifiers and hand clean values to the services.
"""
