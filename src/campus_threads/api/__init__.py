"""HTTP API for the Campus Threads core."""
