"""
models/ - Domain Models
=======================
Plain dataclasses for bugs and comments, plus the typed bug identifier.
These are the objects repositories accept and return.
"""
