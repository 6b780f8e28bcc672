"""Calculation services and their pure calculators."""
