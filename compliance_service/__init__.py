"""HTTP service exposing the Compliance Oracle engine."""
