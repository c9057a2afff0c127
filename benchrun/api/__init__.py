"""HTTP controller for the bench engine."""
