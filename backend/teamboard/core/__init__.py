# teamboard/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and connection management
- pubsub: Table change-event channel (change feed)
- security: Password hashing and access tokens
"""
