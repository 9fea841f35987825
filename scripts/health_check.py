import json
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from sqlalchemy.exc import SQLAlchemyError

from app import app
from extensions import db


def main() -> int:
    out = {"ok": True, "db": False}
    with app.app_context():
        try:
            db.session.execute(db.text("SELECT 1")).scalar()
            out["db"] = True
        except SQLAlchemyError as e:
            out["ok"] = False
            out["error"] = str(e)
    print(json.dumps(out))
    return 0 if out["ok"] else 1


if __name__ == "__main__":
    sys.exit(main())
