"""Network throughput estimation with a decaying gauge ceiling."""

from collections.abc import Sequence

from matricx.formatting import safe_num
from matricx.models import CounterSample, NetworkCounters, RateSample, RateState

DECAY = 0.95
MIN_ELAPSED = 0.001  # seconds


def select_primary_interface(
    counters: Sequence[NetworkCounters],
) -> NetworkCounters | None:
    """First interface that has moved any bytes, else the first one listed."""
    for nic in counters:
        if safe_num(nic.rx_bytes) + safe_num(nic.tx_bytes) > 0:
            return nic
    return counters[0] if counters else None


def _reported(rate: float | None) -> float:
    value = safe_num(rate)
    return value if value > 0 else 0.0


def update_rates(
    state: RateState,
    primary: NetworkCounters | None,
    now: float,
) -> tuple[RateSample, RateState]:
    """
    Compute receive/transmit bytes/sec for one tick and the next RateState.

    A reported instantaneous rate is used when either direction is strictly
    positive. Otherwise the rate is derived from the counter deltas since the
    previous sample, which yields 0 on the very first tick. An idle interface
    reporting 0 therefore also takes the counter path.

    Args:
        state: State returned by the previous tick.
        primary: The primary interface's counters, or None if there is none.
        now: Sample time in seconds.

    Returns:
        The tick's RateSample and the RateState to pass to the next tick.
    """
    rx = tx = 0.0
    last = state.last

    if primary is not None:
        rx_bytes = safe_num(primary.rx_bytes)
        tx_bytes = safe_num(primary.tx_bytes)
        rx = _reported(primary.rx_rate)
        tx = _reported(primary.tx_rate)
        if not (rx > 0 or tx > 0) and state.last is not None:
            elapsed = max(MIN_ELAPSED, now - state.last.at)
            rx = (rx_bytes - state.last.rx) / elapsed
            tx = (tx_bytes - state.last.tx) / elapsed
        last = CounterSample(rx=rx_bytes, tx=tx_bytes, at=now)

    observed_max = max(state.observed_max * DECAY, 1.0, abs(rx), abs(tx))
    sample = RateSample(rx=rx, tx=tx, observed_max=observed_max)
    return sample, RateState(last=last, observed_max=observed_max)


def gauge_fraction(rate: float, observed_max: float) -> float:
    """Fraction of the current ceiling that a rate fills."""
    return abs(safe_num(rate)) / max(1.0, safe_num(observed_max))
