"""Domain modules registered with the leaderboard core."""
