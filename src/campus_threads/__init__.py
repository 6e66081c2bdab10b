"""Campus Threads: social graph and content mutation layer."""

__version__ = "0.1.0"
