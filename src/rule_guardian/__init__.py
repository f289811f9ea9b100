"""Rule Guardian: real-time chat moderation filter for Discord."""

__version__ = "0.1.0"
