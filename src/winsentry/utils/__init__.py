"""Utility helpers for the compliance engine."""
