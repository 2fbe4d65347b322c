"""Stand-up Room coordinator."""
