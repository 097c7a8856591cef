"""HTTP API for the codementor review engine."""
