"""Review host access."""
