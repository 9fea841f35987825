"""Point the Telegram bot at this deployment's webhook.

Usage:
  python scripts/set_telegram_webhook.py https://academy.example.com
"""
import argparse
import os
import sys

# Ensure project root is importable when running from scripts/
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from app import app
from utils.telegram import set_webhook


def main():
    parser = argparse.ArgumentParser(description="Register the Telegram webhook URL")
    parser.add_argument("base_url", help="Public base URL of the API, e.g. https://academy.example.com")
    args = parser.parse_args()

    url = f"{args.base_url.rstrip('/')}/api/telegram/webhook"
    with app.app_context():
        ok, error = set_webhook(url, app.config.get("TELEGRAM_WEBHOOK_SECRET") or None)
    if not ok:
        print(f"Failed to set webhook: {error}")
        sys.exit(1)
    print(f"Webhook set to {url}")


if __name__ == "__main__":
    main()
