"""Fiscal ticket backend."""
