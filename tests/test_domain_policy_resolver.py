"""
Tests for PolicyResolver.
"""

import pytest
from unittest.mock import AsyncMock, Mock
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.models import PreferenceRecord
from domain.policy_resolver import PolicyResolver


@pytest.fixture
def auto_pin():
    collaborator = Mock()
    collaborator.confirm = AsyncMock(return_value=False)
    collaborator.resign = AsyncMock(return_value=False)
    return collaborator


class TestPolicyResolver:
    """Test signature and pinning checks."""

    @pytest.mark.asyncio
    async def test_all_clean_never_prompts(self, auto_pin, make_preferences):
        """Test verified and pinned preferences resolve to nothing."""
        preferences = {
            "a@x.com": make_preferences("a@x.com"),
            "b@x.com": make_preferences("b@x.com"),
        }

        result = await PolicyResolver(auto_pin).resolve(preferences)

        assert result == []
        auto_pin.confirm.assert_not_awaited()
        auto_pin.resign.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_preferences(self, auto_pin):
        assert await PolicyResolver(auto_pin).resolve({}) == []
        auto_pin.confirm.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unpinned_fixed_by_auto_pin(self, auto_pin, make_preferences):
        """Test accepted auto-pin contributes nothing."""
        auto_pin.confirm.return_value = True
        preferences = {
            "a@x.com": make_preferences("a@x.com", primary_pinned=False),
            "b@x.com": make_preferences("b@x.com", primary_pinned=False),
        }

        result = await PolicyResolver(auto_pin).resolve(preferences)

        assert result == []
        auto_pin.confirm.assert_awaited_once_with(["a@x.com", "b@x.com"])
        auto_pin.resign.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unpinned_declined(self, auto_pin, make_preferences):
        """Test declined auto-pin reports only the unpinned addresses."""
        preferences = {
            "a@x.com": make_preferences("a@x.com", primary_pinned=False),
            "b@x.com": make_preferences("b@x.com"),
        }

        result = await PolicyResolver(auto_pin).resolve(preferences)

        assert result == ["a@x.com"]
        auto_pin.confirm.assert_awaited_once_with(["a@x.com"])

    @pytest.mark.asyncio
    async def test_invalid_signature_fixed_by_resign(self, auto_pin, make_preferences):
        auto_pin.resign.return_value = True
        preferences = {"a@x.com": make_preferences("a@x.com", is_verified=False)}

        assert await PolicyResolver(auto_pin).resolve(preferences) == []
        auto_pin.resign.assert_awaited_once_with(["a@x.com"])

    @pytest.mark.asyncio
    async def test_signature_issues_first_and_duplicates_kept(self, auto_pin, make_preferences):
        """Test ordering and that an address failing both checks appears twice."""
        preferences = {
            "a@x.com": make_preferences("a@x.com", primary_pinned=False),
            "b@x.com": make_preferences("b@x.com", is_verified=False, primary_pinned=False),
            "c@x.com": make_preferences("c@x.com", is_verified=False),
        }

        result = await PolicyResolver(auto_pin).resolve(preferences)

        assert result == ["b@x.com", "c@x.com", "a@x.com", "b@x.com"]

    @pytest.mark.asyncio
    async def test_resign_runs_before_pin(self, auto_pin, make_preferences):
        """Test the re-sign prompt is offered before the pin prompt."""
        calls = []
        auto_pin.resign.side_effect = lambda addresses: calls.append('resign') or False
        auto_pin.confirm.side_effect = lambda addresses: calls.append('confirm') or False
        preferences = {"a@x.com": make_preferences("a@x.com", is_verified=False, primary_pinned=False)}

        await PolicyResolver(auto_pin).resolve(preferences)

        assert calls == ['resign', 'confirm']

    @pytest.mark.asyncio
    async def test_missing_policy_flags_are_violations(self, auto_pin):
        """Test a payload without primaryPinned / isVerified triggers both checks."""
        preferences = {"a@x.com": PreferenceRecord.from_dict("a@x.com", {"encrypt": True})}

        result = await PolicyResolver(auto_pin).resolve(preferences)

        assert result == ["a@x.com", "a@x.com"]
        auto_pin.resign.assert_awaited_once_with(["a@x.com"])
        auto_pin.confirm.assert_awaited_once_with(["a@x.com"])
