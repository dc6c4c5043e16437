"""Integration tests for pyiosense library."""
