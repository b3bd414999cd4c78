"""
Tests for AddressValidator.
"""

import pytest
from unittest.mock import AsyncMock, Mock
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.address_validator import AddressValidator


@pytest.fixture
def key_cache():
    cache = Mock()
    cache.is_invalid = AsyncMock(return_value=False)
    return cache


class TestAddressValidator:
    """Test the ordered validity checks."""

    @pytest.mark.asyncio
    async def test_valid_address(self, key_cache):
        """Test address passing every check."""
        check_typo = Mock(return_value=False)
        validator = AddressValidator(check_typo, key_cache)

        assert await validator.is_invalid("alice@example.com") is False
        check_typo.assert_called_once_with("alice@example.com")
        key_cache.is_invalid.assert_awaited_once_with("alice@example.com")

    @pytest.mark.asyncio
    async def test_malformed_address_short_circuits(self, key_cache):
        """Test malformed address is invalid without consulting collaborators."""
        check_typo = Mock(return_value=False)
        validator = AddressValidator(check_typo, key_cache)

        assert await validator.is_invalid("bad") is True
        check_typo.assert_not_called()
        key_cache.is_invalid.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_typo_short_circuits_key_lookup(self, key_cache):
        """Test typo-flagged address is invalid without a key lookup."""
        validator = AddressValidator(Mock(return_value=True), key_cache)

        assert await validator.is_invalid("alice@gmial.com") is True
        key_cache.is_invalid.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_key_invalid(self, key_cache):
        """Test address reported invalid by the key oracle."""
        key_cache.is_invalid.return_value = True
        validator = AddressValidator(Mock(return_value=False), key_cache)

        assert await validator.is_invalid("ghost@example.com") is True
