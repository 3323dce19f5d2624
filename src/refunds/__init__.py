"""Cancellation refund engine for Midas The Lifestyle luxury rentals."""

__version__ = "0.1.0"
