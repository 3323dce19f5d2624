"""Utility helpers for the refund service."""
