"""Test doubles and sample data shared across the test suite."""
