"""Test doubles shared across test modules."""
