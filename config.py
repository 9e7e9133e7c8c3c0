import logging
import os
from dotenv import load_dotenv

load_dotenv("secrets.env")


class Config:
    # Secret key for session management
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dreamlab-secret-key-123"

    # Database configuration
    basedir = os.path.abspath(os.path.dirname(__file__))
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL"
    ) or "sqlite:///" + os.path.join(basedir, "dreamlab.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    WTF_CSRF_ENABLED = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL") or "INFO"

    # AI Model Configuration
    GOOGLE_API_KEY = (
        os.environ.get("GOOGLE_API_KEY")
        or os.environ.get("GEMINI_API_KEY")
        or os.environ.get("API_KEY")
    )
    ANALYSIS_MODEL = os.environ.get("ANALYSIS_MODEL") or "gemini-2.5-flash"
    IMAGE_MODEL = os.environ.get("IMAGE_MODEL") or "gemini-2.0-flash-preview-image-generation"
    ORACLE_MODEL = os.environ.get("ORACLE_MODEL") or "gemini-2.5-flash"

    # Stored images are downscaled to fit this box and recompressed
    IMAGE_MAX_SIZE = int(os.environ.get("IMAGE_MAX_SIZE") or 1024)
    IMAGE_QUALITY = int(os.environ.get("IMAGE_QUALITY") or 80)

    # Premium
    PROMO_CODE = "DREAMLAB"
    PAYPAL_BUSINESS = os.environ.get("PAYPAL_BUSINESS") or "payments@dreamlab.example"
    PAYPAL_URL = "https://www.paypal.com/cgi-bin/webscr"
    PLANS = {
        "monthly": ("Dream Lab Premium (Monthly)", "10.00"),
        "yearly": ("Dream Lab Premium (Yearly)", "99.00"),
    }

    @staticmethod
    def init_app(app):
        logging.basicConfig(format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
        logging.getLogger().setLevel(app.config["LOG_LEVEL"])
        app.logger.setLevel(app.config["LOG_LEVEL"])
        if not app.config.get("GOOGLE_API_KEY"):
            app.logger.warning("GOOGLE_API_KEY is not configured; interpretation is unavailable")
