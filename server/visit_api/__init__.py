"""Clinical Visit API."""
