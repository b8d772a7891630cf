"""HTTP API for the training load engine."""
