"""Controllers for Rally Tourney."""
