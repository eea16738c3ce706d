"""End-to-end tests that start real Step Function executions."""
