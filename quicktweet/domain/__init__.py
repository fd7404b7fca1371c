"""Domain types, validation helpers and error kinds shared by the services."""
