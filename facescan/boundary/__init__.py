"""
Boundary layer for external system integrations.

Handles all interactions with external systems (database, AWS, Google Drive).
Provides adapters and clients for infrastructure dependencies.
"""
