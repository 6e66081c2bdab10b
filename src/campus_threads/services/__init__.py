"""Domain services for the Campus Threads core."""
