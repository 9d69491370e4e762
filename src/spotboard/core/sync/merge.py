"""Field derivation and merge rules for token records.

Builds the TokenRecord written by a sync cycle from three inputs: the
Hyperliquid listing entry and details, the start price reference entry,
and the record stored before the cycle (the merge base).

Numeric inputs arrive as decimal strings. Derived values are computed
with Decimal; an unparsable input makes the derived field None rather
than failing the token.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

import structlog

from spotboard.core.exceptions import ParseError
from spotboard.data.models.token import CURATED_DEFAULTS, StartPxEntry, TokenRecord
from spotboard.services.hyperliquid.models import SpotToken, TokenDetails

log = structlog.get_logger(__name__)

_TWO_PLACES = Decimal("0.01")
_WIDE_PRECISION = 64

# Curated fields that may be seeded from tokenDetails when not yet set
_SEEDABLE_FROM_DETAILS = ("airdrop1", "airdrop2")


def parse_decimal(value: Any) -> Decimal:
    """Parse an upstream numeric value as a finite Decimal.

    Raises:
        ParseError: If the value is missing, not numeric, or not finite.
    """
    if value is None or isinstance(value, bool):
        raise ParseError(f"Not a number: {value!r}", value=value)
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ParseError(f"Not a number: {value!r}", value=value) from e
    if not result.is_finite():
        raise ParseError(f"Not a finite number: {value!r}", value=value)
    return result


def format_decimal(value: Decimal) -> str:
    """Format a Decimal in plain notation without trailing zeros."""
    normalized = value.normalize()
    if normalized == 0:
        return "0"
    return format(normalized, "f")


def derive_auction_price(seeded_usdc: str | None, circulating_supply: str | None) -> str | None:
    """Auction price: seeded USDC divided by circulating supply.

    None when seeded USDC is empty or zero, when either input does not
    parse or the supply is zero, or when the quotient is out of range.
    """
    if not seeded_usdc:
        return None
    try:
        seeded = parse_decimal(seeded_usdc)
        if seeded == 0:
            return None
        supply = parse_decimal(circulating_supply)
        if supply == 0:
            raise ParseError("Circulating supply is zero", value=circulating_supply)
    except ParseError as e:
        log.debug("auction_price_unavailable", reason=str(e))
        return None
    try:
        return format_decimal(seeded / supply)
    except ArithmeticError as e:
        log.debug("auction_price_unavailable", reason=repr(e))
        return None


def derive_launch_market_cap(start_px: str | None, circulating_supply: str | None) -> str | None:
    """Launch market cap: start price times circulating supply, 2 decimals.

    None when either input is empty or does not parse, or when the
    product cannot be represented to two places.
    """
    if not start_px or not circulating_supply:
        return None
    try:
        price = parse_decimal(start_px)
        supply = parse_decimal(circulating_supply)
    except ParseError as e:
        log.debug("launch_market_cap_unavailable", reason=str(e))
        return None
    try:
        with localcontext() as ctx:
            ctx.prec = _WIDE_PRECISION
            product = (price * supply).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    except ArithmeticError as e:
        # Product too large for the quantize precision, or out of exponent range
        log.debug("launch_market_cap_unavailable", reason=repr(e))
        return None
    return format(product, "f")


def derive_launch_date(deploy_time: str | None) -> str | None:
    """Date part (before the first ``T``) of an ISO deploy timestamp."""
    if not deploy_time:
        return None
    return deploy_time.split("T", 1)[0] or None


def _merge_curated(existing: TokenRecord | None, details: TokenDetails) -> dict[str, Any]:
    curated: dict[str, Any] = {}
    previous = existing.curated() if existing is not None else {}
    for name, default in CURATED_DEFAULTS.items():
        value = previous.get(name)
        if value is None and name in _SEEDABLE_FROM_DETAILS:
            value = getattr(details, name)
        curated[name] = default if value is None else value
    return curated


def build_token_record(
    token: SpotToken,
    details: TokenDetails,
    start_px_entry: StartPxEntry | None,
    existing: TokenRecord | None,
    now: datetime,
) -> TokenRecord:
    """Merge upstream data onto the pre-cycle record.

    Machine-derived fields come from ``token`` and ``details``. Curated
    fields are carried forward from ``existing`` and defaulted only where
    it has no value. ``start_px`` comes from the reference entry, falling
    back to the value already stored.

    Args:
        token: Listing entry.
        details: Token details for the entry.
        start_px_entry: Reference entry with the same index, if any.
        existing: Stored record from the cycle's snapshot, if any.
        now: Cycle timestamp.

    Returns:
        The full record to write.
    """
    start_px = start_px_entry.start_px if start_px_entry is not None else None
    if start_px is None and existing is not None:
        start_px = existing.start_px

    circulating_supply = details.circulating_supply or None

    return TokenRecord(
        name=token.name,
        token_id=token.token_id,
        index=token.index,
        token_index=token.index,
        start_px=start_px,
        mark_px=details.mark_px or None,
        launch_date=derive_launch_date(details.deploy_time),
        auction_price=derive_auction_price(details.seeded_usdc, circulating_supply),
        launch_circ_supply=circulating_supply,
        launch_market_cap=derive_launch_market_cap(start_px, circulating_supply),
        last_updated=now,
        **_merge_curated(existing, details),
    )
