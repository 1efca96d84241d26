"""Chart assembly and rendering layer.

This module selects regions, builds panel lines with stable colours,
and writes static comparison images.
"""
