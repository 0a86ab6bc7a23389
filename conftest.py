"""
Pytest configuration file for the storefront test suite.

Test settings are pinned here, before any ``storefront`` module reads its
configuration, so every test runs against an in-memory SQLite database.
"""
import os

os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("LOG_LEVEL", "WARNING")
