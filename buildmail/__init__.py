"""buildmail: attachment collection and size budgeting for build notifications."""

__version__ = "1.0.0"
