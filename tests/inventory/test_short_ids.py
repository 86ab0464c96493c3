"""Tests for box and QR short id generation."""

import pytest

from shelfmap.inventory.short_ids import (
    BOX_ALPHABET,
    BOX_SHORT_ID_LENGTH,
    MAX_ATTEMPTS,
    box_short_id,
    is_qr_short_id,
    qr_short_id,
    unique_short_id,
)


class TestFormats:

    def test_box_short_id(self) -> None:
        value = box_short_id()
        assert len(value) == BOX_SHORT_ID_LENGTH
        assert set(value) <= set(BOX_ALPHABET)

    def test_qr_short_id_matches_pattern(self) -> None:
        for _ in range(20):
            assert is_qr_short_id(qr_short_id())

    @pytest.mark.parametrize("value", ["QR-abc123", "QR-ABC12", "XX-ABC123", "QR-ABC1234"])
    def test_rejects_malformed(self, value: str) -> None:
        assert not is_qr_short_id(value)


class TestUniqueShortId:

    @pytest.mark.anyio
    async def test_skips_taken_and_reserved(self) -> None:
        candidates = iter(["A", "B", "C"])

        async def is_taken(value: str) -> bool:
            return value == "A"

        assert await unique_short_id(lambda: next(candidates), is_taken, {"B"}) == "C"

    @pytest.mark.anyio
    async def test_gives_up_after_max_attempts(self) -> None:
        calls = []

        async def always_taken(value: str) -> bool:
            calls.append(value)
            return True

        assert await unique_short_id(lambda: "X", always_taken) is None
        assert len(calls) == MAX_ATTEMPTS
