from __future__ import annotations

from datetime import date
from typing import cast

from sqlalchemy import desc
from sqlmodel import Session, col, select

from superdate.models.profile import CandidateOut, Profile
from superdate.models.swipe import Swipe


def years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year - years, day=28)


def age_on(birth_date: date | None, today: date) -> int | None:
    if birth_date is None:
        return None
    before_birthday = (today.month, today.day) < (birth_date.month, birth_date.day)
    return today.year - birth_date.year - int(before_birthday)


def _to_candidate(profile: Profile, today: date) -> CandidateOut:
    return CandidateOut(
        profile_id=cast(int, profile.id),
        user_id=profile.user_id,
        first_name=profile.first_name,
        last_name=profile.last_name,
        birth_date=profile.birth_date,
        country=profile.country,
        city=profile.city,
        gender=profile.gender,
        religion=profile.religion,
        hobbies=profile.hobbies,
        bio=profile.bio,
        age=age_on(profile.birth_date, today),
        created_at=profile.created_at,
    )


def discover_profiles(
    session: Session,
    user_id: str,
    *,
    limit: int,
    today: date | None = None,
) -> list[CandidateOut]:
    """Profiles of other users that ``user_id`` has not swiped on yet."""
    today = today or date.today()
    already_swiped = select(Swipe.target_id).where(Swipe.swiper_id == user_id)
    statement = (
        select(Profile)
        .where(Profile.user_id != user_id)
        .where(col(Profile.user_id).not_in(already_swiped))
        .order_by(desc(Profile.created_at), desc(Profile.id))
        .limit(limit)
    )
    return [_to_candidate(profile, today) for profile in session.exec(statement).all()]


def search_profiles(
    session: Session,
    user_id: str,
    *,
    gender: str | None = None,
    religion: str | None = None,
    city: str | None = None,
    min_age: int | None = None,
    max_age: int | None = None,
    limit: int,
    today: date | None = None,
) -> list[CandidateOut]:
    today = today or date.today()
    statement = select(Profile).where(Profile.user_id != user_id)
    if gender:
        statement = statement.where(Profile.gender == gender)
    if religion:
        statement = statement.where(Profile.religion == religion)
    if city:
        statement = statement.where(Profile.city == city)
    if min_age is not None:
        statement = statement.where(
            col(Profile.birth_date) <= years_before(today, min_age)
        )
    if max_age is not None:
        statement = statement.where(
            col(Profile.birth_date) > years_before(today, max_age + 1)
        )
    statement = statement.order_by(desc(Profile.created_at), desc(Profile.id)).limit(limit)
    return [_to_candidate(profile, today) for profile in session.exec(statement).all()]
