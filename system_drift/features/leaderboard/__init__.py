"""Leaderboard feature - ranking and aggregation over session records."""
