from __future__ import annotations

import os
import sys
from datetime import date
from pathlib import Path

from sqlmodel import Session, select

# --- make project root importable even if CWD is different ---
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Now we can import our app packages
from superdate.core.db import engine, init_db  # type: ignore
from superdate.core.security import hash_pin  # type: ignore
from superdate.models.profile import Profile  # type: ignore
from superdate.models.user import User  # type: ignore

DEMO_USERS = [
    ("+995555000001", "Nino", "female", "Tbilisi", date(1996, 3, 14)),
    ("+995555000002", "Giorgi", "male", "Tbilisi", date(1993, 11, 2)),
    ("+995555000003", "Mariam", "female", "Batumi", date(1999, 7, 21)),
    ("+995555000004", "Luka", "male", "Kutaisi", date(1990, 1, 5)),
]
DEMO_PIN = "1234"


def run() -> None:
    env_file = os.environ.get("ENV_FILE", "superdate/.env")
    print(f"[seed] ENV_FILE={env_file}")

    init_db()
    created_users = 0
    created_profiles = 0

    with Session(engine) as session:
        for phone, first_name, gender, city, birth_date in DEMO_USERS:
            user = session.exec(select(User).where(User.phone == phone)).first()
            if not user:
                user = User(phone=phone, pin_hash=hash_pin(DEMO_PIN))
                session.add(user)
                session.commit()
                session.refresh(user)
                created_users += 1
                print(f"[seed] created user: {phone}")
            else:
                print(f"[seed] user already exists: {phone}")

            profile = session.exec(
                select(Profile).where(Profile.user_id == user.id)
            ).first()
            if not profile:
                session.add(
                    Profile(
                        user_id=user.id,
                        first_name=first_name,
                        gender=gender,
                        city=city,
                        country="Georgia",
                        birth_date=birth_date,
                    )
                )
                session.commit()
                created_profiles += 1
                print(f"[seed] created profile: {first_name}")

    print(
        f"[seed] done. users_created={created_users}, "
        f"profiles_created={created_profiles} (pin for all: {DEMO_PIN})"
    )


if __name__ == "__main__":
    run()
