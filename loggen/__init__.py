"""loggen — replay a tree of sample files as live, growing log files."""

__version__ = "0.2.0"
