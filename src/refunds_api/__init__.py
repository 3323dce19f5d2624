"""HTTP API for the refund service."""
