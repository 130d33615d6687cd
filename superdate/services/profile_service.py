from __future__ import annotations

from sqlmodel import Session, select

from superdate.core.clock import utc_now
from superdate.models.profile import Profile, ProfileIn


def get_profile(session: Session, user_id: str) -> Profile | None:
    return session.exec(select(Profile).where(Profile.user_id == user_id)).first()


def upsert_profile(session: Session, user_id: str, payload: ProfileIn) -> Profile:
    """Create the caller's profile or replace every field of the existing one.

    Fields left out of ``payload`` are stored as null.
    """
    values = {
        field: getattr(payload, field) for field in ProfileIn.model_fields
    }

    profile = get_profile(session, user_id)
    if profile is None:
        profile = Profile(user_id=user_id, **values)
        session.add(profile)
    else:
        for field, value in values.items():
            setattr(profile, field, value)
        profile.updated_at = utc_now()

    session.commit()
    session.refresh(profile)
    return profile
