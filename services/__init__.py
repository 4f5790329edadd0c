"""Domain services behind the /api/auth blueprint."""
