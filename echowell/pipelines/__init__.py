"""Multi-stage processing pipelines."""
