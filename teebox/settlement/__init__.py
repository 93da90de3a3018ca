"""Matchup, pick and parlay settlement."""
