"""Utility helpers for mx."""
