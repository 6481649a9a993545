"""Flask application serving the leaderboard API."""
