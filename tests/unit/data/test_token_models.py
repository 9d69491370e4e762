"""Tests for token data models."""

from spotboard.data.models.token import CURATED_DEFAULTS, CURATED_FIELDS, TokenRecord


def test_camel_case_export(token_record_factory):
    """Front-end export uses camelCase keys."""
    record = token_record_factory(index=2, launch_market_cap="1500.00", highlighted=True)

    exported = record.model_dump(mode="json", by_alias=True)

    assert exported["tokenIndex"] == 2
    assert exported["launchMarketCap"] == "1500.00"
    assert exported["highlighted"] is True
    assert "spreadLessThanThree" in exported


def test_accepts_camel_case_input():
    """Records can be loaded from exported camelCase documents."""
    record = TokenRecord.model_validate(
        {"name": "PURR", "tokenId": "0x01", "index": 1, "tokenIndex": 1, "markPx": "0.2"}
    )

    assert record.token_id == "0x01"
    assert record.mark_px == "0.2"


def test_curated_returns_only_curated_fields(token_record_factory):
    """curated() covers exactly the operator-edited fields."""
    record = token_record_factory(team_allocation="10%")

    curated = record.curated()

    assert tuple(curated) == CURATED_FIELDS
    assert curated["team_allocation"] == "10%"
    assert set(CURATED_DEFAULTS) == set(CURATED_FIELDS)
