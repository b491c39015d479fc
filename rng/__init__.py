"""Seeded random number generation."""
