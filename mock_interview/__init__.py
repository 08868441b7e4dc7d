"""AI mock interview: interview-session state machine and terminal front end."""

__version__ = "0.1.0"
