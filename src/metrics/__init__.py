"""Metric derivation layer.

This module turns ordered region series into cumulative, delta, rolling,
and per-capita series, backed by a static population table.
"""
