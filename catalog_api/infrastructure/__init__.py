"""Infrastructure module.

Configuration, logging, database access, blob storage and bounded store
calls.
"""
