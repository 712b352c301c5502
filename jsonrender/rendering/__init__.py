"""Template loading, output sinks and batch orchestration."""
