"""Tests for key selection with a single key set refresh.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from jwks_verifier.exceptions import (
    AmbiguousKeyError,
    InvalidInputError,
    KeyNotFoundError,
    RefreshFailedError,
)
from jwks_verifier.models import KeySet, TokenHeader
from jwks_verifier.refresh import select_with_refresh


@pytest.fixture
def stale_key_set(rsa_jwk) -> KeySet:
    """Key set holding only the old key 'rsa-old'."""
    return KeySet.from_jwks({"keys": [rsa_jwk(kid="rsa-old")]})


class TestSelectWithRefresh:
    """Tests for the refresh-and-reselect cycle."""

    @pytest.mark.asyncio
    async def test_selected_without_refresh(self, stale_key_set: KeySet):
        """Given a matching key, refresh is never invoked."""
        # Arrange
        refresh = AsyncMock()

        # Act
        resolved = await select_with_refresh(TokenHeader(alg="RS256", kid="rsa-old"), stale_key_set, refresh)

        # Assert
        assert resolved.key.kid == "rsa-old"
        assert resolved.refreshed is False
        refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refresh_finds_rotated_key(self, stale_key_set: KeySet, rsa_jwk):
        """Given a kid missing from the set, refreshes once and selects from the new set."""
        # Arrange
        new_set = KeySet.from_jwks({"keys": [rsa_jwk(kid="missing-1")]})
        refresh = AsyncMock(return_value=new_set)

        # Act
        resolved = await select_with_refresh(TokenHeader(alg="RS256", kid="missing-1"), stale_key_set, refresh)

        # Assert
        assert resolved.key.kid == "missing-1"
        assert resolved.refreshed is True
        assert resolved.key_set is new_set
        refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_refresh_accepts_raw_jwks(self, stale_key_set: KeySet, rsa_jwk):
        """Given a refresh returning a JWKS dict, it is parsed into a KeySet."""
        # Arrange
        refresh = AsyncMock(return_value={"keys": [rsa_jwk(kid="missing-1")]})

        # Act
        resolved = await select_with_refresh(TokenHeader(alg="RS256", kid="missing-1"), stale_key_set, refresh)

        # Assert
        assert resolved.key.kid == "missing-1"

    @pytest.mark.asyncio
    async def test_second_miss_terminates_after_one_refresh(self, stale_key_set: KeySet):
        """Given a refresh that still lacks the kid, raises KeyNotFoundError after one refresh."""
        # Arrange
        refresh = AsyncMock(return_value=stale_key_set)

        # Act & Assert
        with pytest.raises(KeyNotFoundError, match="missing-1") as exc_info:
            await select_with_refresh(TokenHeader(alg="RS256", kid="missing-1"), stale_key_set, refresh)

        assert exc_info.value.kid == "missing-1"
        assert refresh.await_count == 1
        assert exc_info.value.refreshed is True
        assert exc_info.value.refreshed_key_count == 1

    @pytest.mark.asyncio
    async def test_caller_key_set_is_not_modified(self, stale_key_set: KeySet, rsa_jwk):
        """Given a successful refresh, the caller's key set is unchanged."""
        # Arrange
        keys_before = stale_key_set.keys
        refresh = AsyncMock(return_value=KeySet.from_jwks({"keys": [rsa_jwk(kid="missing-1")]}))

        # Act
        await select_with_refresh(TokenHeader(alg="RS256", kid="missing-1"), stale_key_set, refresh)

        # Assert
        assert stale_key_set.keys is keys_before
        assert stale_key_set.key_ids == ["rsa-old"]

    @pytest.mark.asyncio
    async def test_refreshed_set_replaces_instead_of_merging(self, stale_key_set: KeySet, ec_jwk):
        """Given a refreshed set without the old key, the old key is not selectable."""
        # Arrange
        refresh = AsyncMock(return_value=KeySet.from_jwks({"keys": [ec_jwk(kid="ec-new")]}))

        # Act
        resolved = await select_with_refresh(TokenHeader(alg="ES256", kid="ec-new"), stale_key_set, refresh)

        # Assert
        assert resolved.key_set.key_ids == ["ec-new"]

    @pytest.mark.asyncio
    async def test_not_found_without_refresh_names_kid(self, stale_key_set: KeySet):
        """Given no refresh and a missing kid, raises KeyNotFoundError naming the kid."""
        # Act & Assert
        with pytest.raises(KeyNotFoundError, match="Expected key id \\(kid\\): missing-1") as exc_info:
            await select_with_refresh(TokenHeader(alg="RS256", kid="missing-1"), stale_key_set)

        assert exc_info.value.refreshed is False

    @pytest.mark.asyncio
    async def test_not_found_without_kid_is_generic(self, stale_key_set: KeySet):
        """Given no kid and no key of the type, raises a generic KeyNotFoundError."""
        # Act & Assert
        with pytest.raises(KeyNotFoundError, match="No matching key found") as exc_info:
            await select_with_refresh(TokenHeader(alg="ES256"), stale_key_set)

        assert exc_info.value.kid is None

    @pytest.mark.asyncio
    async def test_not_found_without_kid_refreshes(self, stale_key_set: KeySet, ec_jwk):
        """Given no kid and no key of the type, refresh is tried once."""
        # Arrange
        refresh = AsyncMock(return_value={"keys": [ec_jwk(kid=None)]})

        # Act
        resolved = await select_with_refresh(TokenHeader(alg="ES256"), stale_key_set, refresh)

        # Assert
        assert resolved.key.kty == "EC"
        refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ambiguous_never_refreshes(self, rsa_jwk, other_rsa_jwk):
        """Given two RSA sig keys and no kid, raises AmbiguousKeyError without refreshing."""
        # Arrange
        key_set = KeySet.from_jwks({"keys": [rsa_jwk(), other_rsa_jwk()]})
        refresh = AsyncMock()

        # Act & Assert
        with pytest.raises(AmbiguousKeyError) as exc_info:
            await select_with_refresh(TokenHeader(alg="RS256"), key_set, refresh)

        assert exc_info.value.candidate_count == 2
        refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ambiguous_after_refresh(self, rsa_jwk, other_rsa_jwk):
        """Given a refreshed set with two candidates, raises AmbiguousKeyError."""
        # Arrange
        key_set = KeySet.from_jwks({"keys": [rsa_jwk(use="enc")]})
        refresh = AsyncMock(return_value={"keys": [rsa_jwk(), other_rsa_jwk()]})

        # Act & Assert
        with pytest.raises(AmbiguousKeyError):
            await select_with_refresh(TokenHeader(alg="RS256"), key_set, refresh)

        refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_refresh_exception_is_wrapped(self, stale_key_set: KeySet):
        """Given a refresh that raises, raises RefreshFailedError chaining the cause."""
        # Arrange
        cause = httpx.ConnectError("connection refused")
        refresh = AsyncMock(side_effect=cause)

        # Act & Assert
        with pytest.raises(RefreshFailedError) as exc_info:
            await select_with_refresh(TokenHeader(alg="RS256", kid="missing-1"), stale_key_set, refresh)

        assert exc_info.value.__cause__ is cause
        assert refresh.await_count == 1

    @pytest.mark.asyncio
    async def test_refresh_returning_empty_set_is_invalid_input(self, stale_key_set: KeySet):
        """Given a refresh returning no keys, raises InvalidInputError."""
        # Arrange
        refresh = AsyncMock(return_value={"keys": []})

        # Act & Assert
        with pytest.raises(InvalidInputError):
            await select_with_refresh(TokenHeader(alg="RS256", kid="missing-1"), stale_key_set, refresh)
