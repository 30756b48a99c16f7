"""Unit test configuration.

Sets up environment variables required for module imports.
"""

import os

# Set test environment variables before any imports
os.environ.setdefault("JWT_SECRET", "test-secret-for-unit-tests")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("IDENTITY_PROVIDER", "local")
