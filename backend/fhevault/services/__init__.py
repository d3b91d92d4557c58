"""Strategy domain services: codec, validation, storage and scoring.

Imported by HTTP routes, socket handlers and CLI commands, keeping transport
concerns separated from the mock encryption pipeline.
"""
