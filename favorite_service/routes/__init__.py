"""HTTP route blueprints for the favorite-number service."""
