"""Report ingestion pipeline.

This module reads raw case/death payloads, parses report rows, and
groups them into time-ordered region series for the metric layer.
"""
