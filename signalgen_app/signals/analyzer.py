"""
Digit pattern analyzer.

Pure functions that turn a digit window and a strategy choice into a
SignalCandidate, or None when the strategy's rule does not fire.

Rules, applied to the most recent ANALYSIS_WINDOW digits:
- Even/Odd: a run of same-parity digits at least `threshold` long predicts
  the opposite parity.
- Over/Under: a run of same-side digits (>= 5 vs < 5) at least `threshold`
  long predicts the opposite side.
- Matches/Differs: a digit seen at least `threshold` times predicts DIFFERS
  on it; otherwise a digit never seen predicts MATCHES on it.
"""

from typing import Callable, Optional, Sequence

from ..data.models import PredictedSignal, SignalCandidate, StrategyName

ANALYSIS_WINDOW = 10
MIN_DIGITS = 5
HIGH_DIGIT_THRESHOLD = 5


def is_even(digit: int) -> bool:
    return digit % 2 == 0


def is_high(digit: int) -> bool:
    return digit >= HIGH_DIGIT_THRESHOLD


def consecutive_run(digits: Sequence[int], same_class: Callable[[int], bool]) -> int:
    """Length of the trailing run of digits sharing the last digit's class."""
    if not digits:
        return 0

    last_class = same_class(digits[-1])
    run = 0
    for digit in reversed(digits):
        if same_class(digit) != last_class:
            break
        run += 1
    return run


def digit_frequencies(digits: Sequence[int]) -> list[int]:
    """Occurrence count of each digit 0-9."""
    counts = [0] * 10
    for digit in digits:
        counts[digit] += 1
    return counts


def most_frequent_digit(counts: Sequence[int]) -> int:
    """Digit with the highest count; ties go to the smallest digit."""
    best = 0
    for digit in range(1, len(counts)):
        if counts[digit] > counts[best]:
            best = digit
    return best


def least_frequent_digit(counts: Sequence[int]) -> int:
    """First digit never seen, else the digit with the lowest count (smallest wins ties)."""
    for digit, count in enumerate(counts):
        if count == 0:
            return digit

    best = 0
    for digit in range(1, len(counts)):
        if counts[digit] < counts[best]:
            best = digit
    return best


def _analyze_even_odd(
    digits: Sequence[int],
    threshold: int,
    win_rate: str
) -> Optional[SignalCandidate]:
    run = consecutive_run(digits, is_even)
    if run < threshold:
        return None

    last_even = is_even(digits[-1])
    observed = "even" if last_even else "odd"
    opposite = "odd" if last_even else "even"

    return SignalCandidate(
        strategy_name=StrategyName.EVEN_ODD.value,
        predicted_signal=PredictedSignal.ODD if last_even else PredictedSignal.EVEN,
        reason=(
            f"After {run} consecutive {observed} digits, probability of an "
            f"{opposite} digit is higher based on market patterns."
        ),
        entry_point=f"After {threshold} consecutive {observed} digits",
        win_probability=win_rate,
        run_length=run,
    )


def _analyze_over_under(
    digits: Sequence[int],
    threshold: int,
    win_rate: str
) -> Optional[SignalCandidate]:
    run = consecutive_run(digits, is_high)
    if run < threshold:
        return None

    last_high = is_high(digits[-1])
    observed = "over" if last_high else "under"
    opposite = "under 5" if last_high else "over 4"

    return SignalCandidate(
        strategy_name=StrategyName.OVER_UNDER.value,
        predicted_signal=PredictedSignal.UNDER if last_high else PredictedSignal.OVER,
        reason=(
            f"After {run} consecutive digits {observed} threshold, probability of "
            f"digit {opposite} is higher based on market patterns."
        ),
        entry_point=f"After {threshold} consecutive {observed}",
        win_probability=win_rate,
        run_length=run,
    )


def _analyze_matches_differs(
    digits: Sequence[int],
    threshold: int,
    win_rate: str
) -> Optional[SignalCandidate]:
    counts = digit_frequencies(digits)
    most = most_frequent_digit(counts)
    least = least_frequent_digit(counts)

    if counts[most] >= threshold:
        return SignalCandidate(
            strategy_name=StrategyName.MATCHES_DIFFERS.value,
            predicted_signal=PredictedSignal.DIFFERS,
            reason=(
                f"Digit {most} has appeared {counts[most]} times recently, "
                f"indicating statistical reversion."
            ),
            entry_point=f"When digit {most} appears",
            win_probability=win_rate,
            target_digit=most,
        )

    if counts[least] == 0:
        return SignalCandidate(
            strategy_name=StrategyName.MATCHES_DIFFERS.value,
            predicted_signal=PredictedSignal.MATCHES,
            reason=(
                f"Digit {least} hasn't appeared in the last {len(digits)} digits, "
                f"increasing probability of appearance."
            ),
            entry_point=f"Next digit matches {least}",
            win_probability=win_rate,
            target_digit=least,
        )

    return None


_RULES = {
    StrategyName.EVEN_ODD.value: _analyze_even_odd,
    StrategyName.OVER_UNDER.value: _analyze_over_under,
    StrategyName.MATCHES_DIFFERS.value: _analyze_matches_differs,
}


def analyze(
    window: Sequence[int],
    strategy_name: str,
    consecutive_threshold: int,
    win_rate: str,
    analysis_window: int = ANALYSIS_WINDOW,
    min_digits: int = MIN_DIGITS
) -> Optional[SignalCandidate]:
    """
    Evaluate a strategy's rule against a digit window.

    Args:
        window: Digits oldest first
        strategy_name: "Even/Odd", "Over/Under" or "Matches/Differs"
        consecutive_threshold: Run length (or digit count) that fires the rule
        win_rate: Strategy win rate, copied onto the candidate verbatim
        analysis_window: Number of most recent digits considered
        min_digits: Digits required before any rule is evaluated; never
            lower than MIN_DIGITS

    Returns:
        SignalCandidate, or None for insufficient history, an unknown
        strategy, or a rule that did not fire
    """
    if len(window) < max(min_digits, MIN_DIGITS):
        return None

    rule = _RULES.get(strategy_name)
    if rule is None:
        return None

    recent = list(window)[-analysis_window:]
    return rule(recent, consecutive_threshold, win_rate)


def supported_strategies() -> list[str]:
    return list(_RULES)
