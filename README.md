# lendmath

Fixed-point arithmetic, borrow rate curves and oracle price validation for
lending markets. The package uses only the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `lendmath.fraction`

- `Fraction` is an unsigned 128-bit fixed-point number with 60 fractional bits.
  It is immutable and ordered, and it stores its raw scaled value in `bits`.
  - Constructors: `from_bits`, `from_num` (int, float, `Decimal` or
    `fractions.Fraction`, rounded to the nearest representable value),
    `from_bps` and `from_percent`.
  - Arithmetic: `+`, `-`, `*` and `/` work with another `Fraction` or an int.
    A result outside the 128-bit range raises `OverflowError`.
    `checked_add`, `checked_sub` and `checked_mul` return `None` instead of
    raising. `checked_pow` and `abs_diff` are also available.
  - Ratios and division: `mul_int_ratio`, `full_mul_int_ratio` (which uses a
    256-bit intermediate) and `div_ceil`.
  - Rounding: `floor`, `ceil` and `round`, which returns a `Fraction`, and
    `to_floor`, `to_ceil`, `to_round`, `to_bps` and `to_percent`, which return
    an int.
  - Formatting: `to_display()` and `str()` both give four decimal places.
  - Constants: `Fraction.ZERO`, `Fraction.ONE` and `Fraction.MAX`.
- `BigFraction` is the same format held in 256 bits, for intermediate results.
  It has `from_fraction`, `from_num`, `to_fraction`, `to_limbs` and
  `from_limbs`. `to_fraction` raises `LendingError(INTEGER_OVERFLOW)` when the
  value does not fit in a `Fraction`.
- Helpers: `pow_fraction`, `bps_u128_to_fraction`, `pct_u128_to_fraction`,
  `to_sf`, `from_sf`, `FRACTION_ONE_SCALED` and `EPSILON`.

### `lendmath.borrow_rate_curve`

`BorrowRateCurve` is a piecewise-linear map from utilization to borrow rate.
It always holds 11 `CurvePoint`s, and any unused trailing slots repeat the
last point.

- `from_points` builds a curve from 2 to 11 points and validates it.
- `new_flat` builds a curve with one rate at every utilization.
- `from_legacy_parameters` builds a curve from base, optimal and maximum rate
  percentages.
- `validate` checks the curve. The first point must be at utilization 0 and
  the last at 10000 bps. Utilization must increase strictly and the borrow
  rate must never decrease.
- `get_borrow_rate` interpolates the rate. A utilization above 100% is capped
  at 100%.
- `to_points` returns the points up to and including the first one at 100%.

`CurveSegment` is the linear piece between two points.

```python
from lendmath.fraction import Fraction
from lendmath.borrow_rate_curve import BorrowRateCurve, CurvePoint

curve = BorrowRateCurve.from_points([
    CurvePoint(0, 100),
    CurvePoint(8000, 1000),
    CurvePoint(10000, 5000),
])
rate = curve.get_borrow_rate(Fraction.from_percent(50))
print(rate.to_bps(), rate.to_display())
```

### `lendmath.consts`

This module holds protocol constants, such as slot and second conversions,
`FULL_BPS`, account sizes and price decimal limits. It also holds the known
program ids as 32-byte `bytes`, listed in `CPI_WHITELISTED_ACCOUNTS` as
`CpiWhitelistedAccount` entries.

- `ten_pow(x)` returns 10**x for x from 0 to 19.
- `maybe_null_pk(pubkey)` returns `None` for the all-zero key or for
  `NULL_PUBKEY`, and returns the key otherwise.

### `lendmath.secs`

`to_days_fractional`, `from_days` and `from_hours` convert between seconds,
hours and days. Values outside the unsigned 64-bit range raise
`OverflowError`.

### `lendmath.validation`

- `validate_numerical_bool(value)` accepts 0 or 1 and returns a bool. Any
  other value raises `LendingError(INVALID_FLAG)`.
- `zip_and_validate_same_length(lefts, rights)` yields pairs. It raises
  `LengthMismatchError` when one side runs out first.

### `lendmath.errors`

Checks that fail raise `LendingError`. Its `code` is a `LendingErrorCode` and
its `message` is a text description.

### `lendmath.prices`

- `types`:
  - `Price` is an unsigned integer value with a decimal exponent and a bit
    width. It has `to_adjusted_exp`, `reduce_exp_lossy` and `size_up`.
  - `TimestampedPrice` is a price computed on demand through `load()`.
  - `TimestampedPriceWithTwap` pairs a price with an optional TWAP.
- `utils`: `price_to_fraction` and `ten_pow` (exponents 0 to 36).
- `checks`:
  - `check_price_age`, `is_within_tolerance`, `check_twap_in_tolerance` and
    `check_price_heuristics`.
  - `get_validated_price` loads a price and returns a `GetPriceResult`. The
    result's `PriceStatusFlags` record which checks the price passed. The
    function returns `None` if the price cannot be loaded.
  - Settings come from `PriceValidationSettings` and `PriceHeuristic`.
- `pyth`: `PythPrice`, `PriceFeedMessage`, `validate_pyth_confidence`,
  `split_price_and_twap`, `timestamped_price_from_pyth` and
  `get_pyth_price_and_twap`. The EMA price serves as the TWAP.
- `switchboard`: `SwitchboardFeed`, `validate_switchboard_confidence`,
  `get_switchboard_price` and `get_switchboard_price_and_twap`. A price's
  timestamp is set back by the slots elapsed since its update, at 400 ms per
  slot.
- `scope`: `ScopePrice`, `get_base_price`, `get_price_usd` and
  `get_scope_price_and_twap`.
  - A chain holds four ids. It stops at the first id that is out of range.
  - When the chain resolves to more than one price, the prices are
    multiplied together, and the result is stamped with the oldest timestamp.
- `selection`:
  - `most_recent_price` picks the candidate with the latest timestamp and
    skips `None` candidates.
  - `get_price` validates the candidate that `most_recent_price` picks.

The following example validates a Scope price:

```python
from lendmath.prices.checks import PriceValidationSettings
from lendmath.prices.scope import ScopePrice, get_scope_price_and_twap
from lendmath.prices.selection import get_price

table = [ScopePrice(value=2_500_000, exp=6, unix_timestamp=1_700_000_000)]
candidate = get_scope_price_and_twap(table, (0, 65535, 65535, 65535))
settings = PriceValidationSettings(symbol="SOL", max_age_price_seconds=60)
result = get_price([candidate, None], settings, unix_timestamp=1_700_000_030)
print(float(result.price), result.status)
```

The following example checks a price against a TWAP:

```python
from lendmath.fraction import Fraction
from lendmath.prices.checks import is_within_tolerance

is_within_tolerance(Fraction.from_num(100), Fraction.from_num(101), 200)  # True
```

Failed checks are logged through the standard `logging` module at INFO level.

## What it does not do

- The package does not read or decode account data.
- It does not fetch prices over a network.
- It has no command-line tool.

The price loaders take values that are already decoded, in the form of
`PriceFeedMessage`, `SwitchboardFeed` and lists of `ScopePrice`. Fetching and
decoding that data is left to the caller.