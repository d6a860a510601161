"""Infrastructure layer module.

Contains configuration, logging setup, wire schemas and the catalog
gateway implementations (HTTP and stand-alone in-memory).
"""
