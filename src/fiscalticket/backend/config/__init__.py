"""Fiscal dataset loading and validation."""
