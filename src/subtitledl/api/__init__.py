"""HTTP API exposing the transform, metadata and resolver operations."""
