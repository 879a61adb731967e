"""csvtail: search CSV files and stream newly appended rows."""

__version__ = "0.1.0"
