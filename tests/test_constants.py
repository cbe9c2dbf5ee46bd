"""
Credentials and keys used across the test suite.

Each can be overridden from the environment; the fallbacks are throwaway
placeholders, never real secrets.
"""

from __future__ import annotations

import os

# Admin account created by the admin_user fixture
TEST_EMAIL = "admin@example.com"
TEST_NAME = "Test Admin"
TEST_PASSWORD = os.environ.get("TEST_PASSWORD") or "x"
TEST_PASSWORD_WRONG = os.environ.get("TEST_PASSWORD_WRONG") or "y"

# JWT signing key installed as SECRET_KEY by conftest
TEST_SECRET_KEY = os.environ.get("TEST_SECRET_KEY") or "test-secret-key"
# Syntactically a JWT, but signed by nobody
TEST_ACCESS_TOKEN_PLACEHOLDER = os.environ.get("TEST_ACCESS_TOKEN") or "a.b.c"

# Outbound service keys
TEST_LLM_API_KEY = os.environ.get("TEST_LLM_API_KEY") or "k"
TEST_TOMTOM_API_KEY = os.environ.get("TEST_TOMTOM_API_KEY") or "t"
