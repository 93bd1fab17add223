"""
GoldTrackr signal engine.

Polls tokenized-gold, crypto and spot gold prices, derives correlations,
PAXG/XAUT arbitrage alerts and trade suggestions, and optionally routes
suggestions to exchange order APIs.
"""

__version__ = "1.0.0"
__author__ = "GoldTrackr"
