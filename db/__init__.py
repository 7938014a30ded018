"""
db/ - Database Layer
====================
Owns the PostgreSQL connection lifecycle, schema creation, and the storage
error taxonomy. This layer is the lowest in the architecture and has no
dependencies on other layers except models and utils.
"""
