from __future__ import annotations

import importlib

from dotenv import load_dotenv

from staff_reporting.config import get_settings_module
from staff_reporting.database.bootstrap import DEMO_USERS, ensure_demo_users


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_users(db_config)

    print(f"OK: demo accounts ready in {db_config.get('database')}")
    for _, email, password, role in DEMO_USERS:
        print(f"  {role:<8} {email} / {password}")


if __name__ == "__main__":
    main()
