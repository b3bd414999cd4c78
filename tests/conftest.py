"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('SEND_PREFERENCES_FUNCTION', 'arn:aws:lambda:us-west-2:123456789012:function:send-preferences-test')
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-west-2')
os.environ.setdefault('ENVIRONMENT', 'test')
os.environ.setdefault('LOG_LEVEL', 'INFO')

from domain.models import PreferenceRecord, RecipientRecord


@pytest.fixture
def make_preferences():
    """Factory for PreferenceRecord with policy-clean defaults."""
    def _make(address, **kwargs):
        kwargs.setdefault("primary_pinned", True)
        kwargs.setdefault("is_verified", True)
        return PreferenceRecord(address=address, **kwargs)
    return _make


@pytest.fixture
def recipients():
    """Two well-formed recipients as they come from the composer."""
    return [
        RecipientRecord(address="alice@example.com", name="Alice"),
        RecipientRecord(address="bob@example.org", name="Bob"),
    ]
