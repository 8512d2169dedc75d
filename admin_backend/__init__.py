"""
Backend package for the fitness admin console.

This package provides a FastAPI application over the Firestore-backed entity
managers, with identity, route guarding and the image pipeline wired in as
dependencies that fall back to in-memory implementations for local runs.
"""
