"""
Feature modules live under this package.

Each module owns its models, policies, services and API blueprint, and reuses
the platform primitives (auth, policies, audit, storage, DB session).
"""
