"""Rolling per-symbol history of trailing price digits."""

import threading
from collections import deque
from dataclasses import asdict
from typing import Any, Optional

import structlog

from ..config.defaults import HistoryParams
from ..config.validation import ConfigValidator
from ..errors import InsufficientDataError, SettingsValidationError
from .parsers import extract_last_digit

logger = structlog.get_logger(__name__)


class RollingDigitHistory:
    """
    Bounded FIFO of last-digit observations per symbol.

    Windows are created lazily on the first observation of a symbol. A single
    lock guards the map and is held only for the duration of one operation,
    so ingestion and cycle reads never wait on each other for long.
    """

    def __init__(self, config: Optional[HistoryParams] = None):
        """
        Raises:
            SettingsValidationError: window_size above the hard limit of
                20 digits, or min_digits below 5
        """
        config = config or HistoryParams()
        validation_errors = ConfigValidator.validate_history_params(asdict(config))
        if validation_errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in validation_errors]
            raise SettingsValidationError(
                "Invalid history parameters: " + "; ".join(error_msgs),
                errors=validation_errors
            )

        self.config = config
        self._windows: dict[str, deque] = {}
        self._lock = threading.Lock()

    @property
    def max_length(self) -> int:
        return self.config.window_size

    def observe(self, symbol: str, price: Any) -> int:
        """
        Append the trailing digit of price to the symbol's window.

        Returns:
            The extracted digit

        Raises:
            MalformedDataError: price is malformed; the window is unchanged
        """
        digit = extract_last_digit(price)

        with self._lock:
            window = self._windows.get(symbol)
            if window is None:
                window = deque(maxlen=self.config.window_size)
                self._windows[symbol] = window
            window.append(digit)

        return digit

    def window(self, symbol: str) -> list[int]:
        """Snapshot of the symbol's digits, oldest first."""
        with self._lock:
            window = self._windows.get(symbol)
            return list(window) if window is not None else []

    def clear(self, symbol: Optional[str] = None) -> None:
        """Drop one symbol's history, or all history when symbol is None."""
        with self._lock:
            if symbol is None:
                self._windows.clear()
            else:
                self._windows.pop(symbol, None)

        logger.debug("Cleared digit history", symbol=symbol or "*")

    def symbols(self) -> list[str]:
        with self._lock:
            return list(self._windows)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def require(self, symbol: str, min_digits: int) -> list[int]:
        """
        Snapshot of the symbol's digits, at least min_digits long.

        Raises:
            InsufficientDataError: fewer than min_digits observed so far
        """
        digits = self.window(symbol)
        if len(digits) < min_digits:
            raise InsufficientDataError(
                f"Need {min_digits} digits for {symbol}, have {len(digits)}",
                required_count=min_digits,
                available_count=len(digits),
                context={"symbol": symbol}
            )
        return digits
