"""WSGI entry point for the favorite-number service."""

import os

from favorite_service import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "1323")))
