"""Game rules: attendance, scheduling, teams and results."""
