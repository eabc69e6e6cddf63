"""
PDF Analyzer entry point

    FLASK_ENV=production gunicorn app:app
    python app.py
"""
import os

from pdf_analyzer import create_app

app = create_app(os.getenv("FLASK_ENV", "development"))


if __name__ == "__main__":
    port = int(os.getenv("PORT", "3000"))
    app.run(host="0.0.0.0", port=port, debug=app.config.get("DEBUG", False))
