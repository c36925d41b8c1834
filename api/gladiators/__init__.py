"""Git Gladiators: contributor leaderboards from GitHub statistics."""
