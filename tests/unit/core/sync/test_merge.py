"""Unit tests for token record derivation and merge rules."""

from datetime import UTC, datetime

import pytest

from spotboard.core.exceptions import ParseError
from spotboard.core.sync.merge import (
    build_token_record,
    derive_auction_price,
    derive_launch_date,
    derive_launch_market_cap,
    format_decimal,
    parse_decimal,
)
from spotboard.data.models.token import CURATED_DEFAULTS

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


class TestParseDecimal:
    """Tests for parse_decimal."""

    @pytest.mark.parametrize("value", ["abc", "", None, "NaN", "Infinity", True])
    def test_invalid_values_raise(self, value):
        with pytest.raises(ParseError):
            parse_decimal(value)

    def test_accepts_numbers_and_whitespace(self):
        assert parse_decimal(" 1.25 ") == parse_decimal(1.25)

    def test_format_decimal_plain_notation(self):
        assert format_decimal(parse_decimal("1E+3")) == "1000"
        assert format_decimal(parse_decimal("0.000")) == "0"
        assert format_decimal(parse_decimal("0.50")) == "0.5"


class TestAuctionPrice:
    """Tests for derive_auction_price."""

    def test_seeded_divided_by_supply(self):
        assert derive_auction_price("1000", "500") == "2"

    def test_fractional_result(self):
        assert derive_auction_price("1", "4") == "0.25"

    @pytest.mark.parametrize("seeded", ["0", "0.0", "", None])
    def test_zero_or_missing_seeded_gives_none(self, seeded):
        assert derive_auction_price(seeded, "500") is None

    def test_zero_supply_gives_none(self):
        assert derive_auction_price("1000", "0") is None

    def test_unparsable_input_gives_none(self):
        assert derive_auction_price("abc", "500") is None
        assert derive_auction_price("1000", None) is None

    def test_quotient_out_of_range_gives_none(self):
        assert derive_auction_price("1e999999", "1e-999999") is None


class TestLaunchMarketCap:
    """Tests for derive_launch_market_cap."""

    def test_two_decimal_places(self):
        assert derive_launch_market_cap("1.5", "1000") == "1500.00"

    def test_rounds_half_up(self):
        assert derive_launch_market_cap("0.125", "1") == "0.13"

    def test_large_values_keep_precision(self):
        assert (
            derive_launch_market_cap("0.123456789", "1000000000000")
            == "123456789000.00"
        )

    @pytest.mark.parametrize(
        ("start_px", "supply"),
        [("1e70", "1"), ("1e999999", "1e999999")],
    )
    def test_unrepresentable_product_gives_none(self, start_px, supply):
        assert derive_launch_market_cap(start_px, supply) is None

    @pytest.mark.parametrize(
        ("start_px", "supply"),
        [(None, "1000"), ("", "1000"), ("1.5", None), ("abc", "1000")],
    )
    def test_missing_or_invalid_gives_none(self, start_px, supply):
        assert derive_launch_market_cap(start_px, supply) is None


class TestLaunchDate:
    """Tests for derive_launch_date."""

    def test_date_part_of_iso_timestamp(self):
        assert derive_launch_date("2024-04-16T05:00:00.000000") == "2024-04-16"

    def test_no_time_part(self):
        assert derive_launch_date("2024-04-16") == "2024-04-16"

    def test_missing(self):
        assert derive_launch_date(None) is None
        assert derive_launch_date("") is None


class TestBuildTokenRecord:
    """Tests for build_token_record."""

    def test_new_record_gets_curated_defaults(
        self, spot_token_factory, token_details_factory
    ):
        """A token seen for the first time gets every curated default."""
        token = spot_token_factory(index=5)
        details = token_details_factory(
            seeded_usdc="1000",
            circulating_supply="500",
            deploy_time="2024-04-16T05:00:00",
        )

        record = build_token_record(token, details, None, None, NOW)

        assert record.token_index == 5
        assert record.index == 5
        assert record.name == token.name
        assert record.token_id == token.token_id
        assert record.auction_price == "2"
        assert record.launch_date == "2024-04-16"
        assert record.launch_circ_supply == "500"
        assert record.start_px is None
        assert record.launch_market_cap is None
        assert record.last_updated == NOW
        assert record.curated() == CURATED_DEFAULTS

    def test_curated_fields_carried_forward(
        self, spot_token_factory, token_details_factory, token_record_factory
    ):
        """Operator edits survive a refresh unchanged."""
        token = spot_token_factory(index=3)
        existing = token_record_factory(
            index=3,
            team_allocation="10%",
            highlighted=True,
            twitter="https://x.com/example",
            dev_reputation=False,
            comment="",
        )

        record = build_token_record(token, token_details_factory(), None, existing, NOW)

        assert record.team_allocation == "10%"
        assert record.highlighted is True
        assert record.twitter == "https://x.com/example"
        assert record.dev_reputation is False
        assert record.comment == ""
        # Unset curated fields still get defaults
        assert record.telegram == ""
        assert record.no_sell_pressure is False

    def test_machine_fields_overwritten(
        self, spot_token_factory, token_details_factory, token_record_factory
    ):
        """Machine-derived fields always come from upstream."""
        token = spot_token_factory(index=3, name="NEW")
        existing = token_record_factory(index=3, name="OLD", mark_px="1.0")
        details = token_details_factory(mark_px="2.5")

        record = build_token_record(token, details, None, existing, NOW)

        assert record.name == "NEW"
        assert record.mark_px == "2.5"

    def test_airdrops_seeded_from_details_when_unset(
        self, spot_token_factory, token_details_factory, token_record_factory
    ):
        """Airdrop values from details fill only empty curated slots."""
        token = spot_token_factory(index=3)
        existing = token_record_factory(index=3, airdrop1="5%")
        details = token_details_factory(airdrop1="1%", airdrop2="2%")

        record = build_token_record(token, details, None, existing, NOW)

        assert record.airdrop1 == "5%"
        assert record.airdrop2 == "2%"

    def test_start_px_from_reference_entry(
        self, spot_token_factory, token_details_factory, start_px_entry_factory
    ):
        """start_px comes from the reference table and feeds the market cap."""
        token = spot_token_factory(index=9)
        details = token_details_factory(circulating_supply="1000")
        entry = start_px_entry_factory(index=9, start_px="1.5")

        record = build_token_record(token, details, entry, None, NOW)

        assert record.start_px == "1.5"
        assert record.launch_market_cap == "1500.00"

    def test_start_px_falls_back_to_stored_value(
        self, spot_token_factory, token_details_factory, token_record_factory
    ):
        """Without a reference entry the stored start_px is kept."""
        token = spot_token_factory(index=9)
        existing = token_record_factory(index=9, start_px="0.5")
        details = token_details_factory(circulating_supply="100")

        record = build_token_record(token, details, None, existing, NOW)

        assert record.start_px == "0.5"
        assert record.launch_market_cap == "50.00"

    def test_unparsable_supply_does_not_fail(
        self, spot_token_factory, token_details_factory, start_px_entry_factory
    ):
        """Bad numeric inputs leave derived fields empty."""
        token = spot_token_factory(index=1)
        details = token_details_factory(seeded_usdc="100", circulating_supply="n/a")
        entry = start_px_entry_factory(index=1, start_px="1")

        record = build_token_record(token, details, entry, None, NOW)

        assert record.auction_price is None
        assert record.launch_market_cap is None
        assert record.launch_circ_supply == "n/a"
