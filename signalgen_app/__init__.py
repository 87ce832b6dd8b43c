"""
SignalGen App - Digit Pattern Signal Generation Engine

Relays price ticks from a trading data feed, keeps a rolling history of
trailing price digits per symbol, and periodically emits heuristic digit
trading signals (Even/Odd, Over/Under, Matches/Differs).
"""

__version__ = "0.1.0"
__author__ = "SignalGen Team"
