"""
PropGuard - Prop-Firm Risk & Compliance Engine

Risk calculations and breach alerting for prop-firm trading accounts. Tracks
drawdown exposure against firm limits, gates trade proposals, simulates loss
cascades, plans recoveries, adjusts risk for the trader's mental state and
projects challenge progress and payouts.
"""

__version__ = "0.1.0"
__author__ = "PropGuard Team"
