"""Marketplace endpoint helpers."""
