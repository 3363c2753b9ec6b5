"""
Synthetic trading-bot signals.

Pure value producers with no monetary side effects. Pass a seeded
random.Random for reproducible output.
"""
import random
from datetime import datetime
from enum import Enum
from typing import Iterator, Optional, Tuple

from app.core.clock import as_naive_utc, to_epoch_ms
from app.core.errors import ValidationError

POINT_SPACING_MS = 1000

SCALPER_TREND_CHANGE_CHANCE = 0.1
SCALPER_MIN_VALUE = -0.1
SCALPER_MAX_VALUE = 0.2


class SignalType(str, Enum):
    RANDOM = "random"
    MEV = "mev"
    SCALPER = "scalper"


def parse_signal_type(value) -> SignalType:
    if value is None:
        return SignalType.RANDOM
    try:
        return SignalType(value)
    except ValueError:
        raise ValidationError(f"Unknown signal type: {value}") from None


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def random_value(min_value: float = 0, max_value: float = 1, rng: Optional[random.Random] = None) -> float:
    """Uniform value in [min_value, max_value]."""
    return _rng(rng).uniform(min_value, max_value)


def mev_value(
    base_min: float = 0.01,
    base_max: float = 0.05,
    spike_chance: float = 0.05,
    spike_min: float = 0.1,
    spike_max: float = 1,
    rng: Optional[random.Random] = None,
) -> float:
    """Mostly small captures with an occasional large spike."""
    rng = _rng(rng)
    if rng.random() < spike_chance:
        return rng.uniform(spike_min, spike_max)
    return rng.uniform(base_min, base_max)


class ScalperSignal:
    """
    Trending scalper returns.

    The trend lives only as long as the instance; each series starts flat.
    """

    def __init__(
        self,
        base_min: float = -0.02,
        base_max: float = 0.08,
        trend_strength: float = 0.03,
        rng: Optional[random.Random] = None,
    ):
        self.base_min = base_min
        self.base_max = base_max
        self.trend_strength = trend_strength
        self.trend = 0.0
        self._rng = _rng(rng)

    def next_value(self) -> float:
        if self._rng.random() < SCALPER_TREND_CHANGE_CHANCE:
            self.trend = self._rng.uniform(-1, 1)
        value = self._rng.uniform(self.base_min, self.base_max)
        value += self.trend * self.trend_strength
        return max(SCALPER_MIN_VALUE, min(value, SCALPER_MAX_VALUE))


def generate_value(
    signal_type: SignalType,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> float:
    """
    A single base value for the latest data point.

    min_value/max_value override the range of the random profile only.
    """
    signal_type = parse_signal_type(signal_type)
    if signal_type is SignalType.MEV:
        return mev_value(rng=rng)
    if signal_type is SignalType.SCALPER:
        return ScalperSignal(rng=rng).next_value()
    return random_value(
        0 if min_value is None else min_value,
        1 if max_value is None else max_value,
        rng=rng,
    )


def generate_series(
    signal_type: SignalType,
    count: int,
    start_time: Optional[int] = None,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    **params,
) -> Iterator[Tuple[int, float]]:
    """
    Yield exactly count (timestamp_ms, base_value) pairs spaced one second apart.

    Args:
        signal_type: random, mev or scalper
        count: Number of points
        start_time: Epoch ms of the first point; defaults to now - count seconds
        now: Clock override used for the default start_time
        rng: Random source
        **params: Profile parameters (min_value/max_value for random, the
            mev_value keywords for mev, ScalperSignal keywords for scalper)
    """
    signal_type = parse_signal_type(signal_type)
    if count < 0:
        raise ValidationError("count must not be negative")
    if start_time is None:
        start_time = to_epoch_ms(as_naive_utc(now)) - count * POINT_SPACING_MS
    rng = _rng(rng)

    if signal_type is SignalType.SCALPER:
        scalper = ScalperSignal(rng=rng, **params)
        next_value = scalper.next_value
    elif signal_type is SignalType.MEV:
        def next_value():
            return mev_value(rng=rng, **params)
    else:
        def next_value():
            return random_value(rng=rng, **params)

    for i in range(count):
        yield start_time + i * POINT_SPACING_MS, next_value()
