"""Discord adapter for the moderation pipeline."""
