"""Tests for the mutual daily streak."""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from unseal_stage.services import MessageStore, StreakCalculator


@pytest.fixture()
def set_streak(db_session, paired):
    """Seed the pair's streak counters."""

    def _set(current: int, last: date | None) -> None:
        paired.current_streak = current
        paired.last_streak_date = last
        db_session.commit()

    return _set


def _send(messages, make_ctx, sender: str, receiver: str, **kwargs):
    ctx = make_ctx(sender, **kwargs)
    return messages.create_message(ctx, receiver, f"from {sender}", ctx.today + timedelta(days=7))


def test_both_partners_today_continues_streak(messages, paired, set_streak, make_ctx, now) -> None:
    """3 days up to yesterday plus both writing today makes 4."""
    set_streak(3, now.date() - timedelta(days=1))

    _send(messages, make_ctx, "u1", "u2")
    assert paired.current_streak == 3
    assert paired.last_streak_date == now.date() - timedelta(days=1)

    _send(messages, make_ctx, "u2", "u1", now=now + timedelta(hours=2))
    assert paired.current_streak == 4
    assert paired.last_streak_date == now.date()


def test_only_one_partner_leaves_streak_untouched(messages, paired, set_streak, make_ctx, now) -> None:
    set_streak(3, now.date() - timedelta(days=1))

    _send(messages, make_ctx, "u1", "u2")
    _send(messages, make_ctx, "u1", "u2", now=now + timedelta(hours=1))

    assert paired.current_streak == 3
    assert paired.last_streak_date == now.date() - timedelta(days=1)


def test_no_double_increment_on_same_day(messages, paired, set_streak, make_ctx, now) -> None:
    set_streak(3, now.date() - timedelta(days=1))

    _send(messages, make_ctx, "u1", "u2")
    _send(messages, make_ctx, "u2", "u1")
    _send(messages, make_ctx, "u1", "u2", now=now + timedelta(hours=3))
    _send(messages, make_ctx, "u2", "u1", now=now + timedelta(hours=4))

    assert paired.current_streak == 4
    assert paired.last_streak_date == now.date()


def test_gap_restarts_streak_at_one(messages, paired, set_streak, make_ctx, now) -> None:
    set_streak(9, now.date() - timedelta(days=3))

    _send(messages, make_ctx, "u1", "u2")
    _send(messages, make_ctx, "u2", "u1")

    assert paired.current_streak == 1
    assert paired.last_streak_date == now.date()


def test_first_mutual_day_starts_streak(messages, paired, make_ctx) -> None:
    assert paired.current_streak == 0
    assert paired.last_streak_date is None

    _send(messages, make_ctx, "u2", "u1")
    _send(messages, make_ctx, "u1", "u2")

    assert paired.current_streak == 1


def test_missed_day_is_not_zeroed(messages, paired, set_streak, make_ctx, now) -> None:
    """A broken streak only stops growing; nothing resets it to 0."""
    set_streak(5, now.date() - timedelta(days=4))

    _send(messages, make_ctx, "u1", "u2")

    assert paired.current_streak == 5
    assert paired.last_streak_date == now.date() - timedelta(days=4)


def test_yesterdays_message_does_not_count_today(messages, paired, make_ctx) -> None:
    _send(messages, make_ctx, "u2", "u1", days=-1)
    _send(messages, make_ctx, "u1", "u2")

    assert paired.current_streak == 0
    assert paired.last_streak_date is None


def test_consecutive_days_accumulate(messages, paired, make_ctx) -> None:
    for day in range(4):
        _send(messages, make_ctx, "u1", "u2", days=day)
        _send(messages, make_ctx, "u2", "u1", days=day)

    assert paired.current_streak == 4
    assert paired.last_streak_date == (make_ctx("u1", days=3)).today


def test_streak_shown_in_stats(messages, partnerships, paired, make_ctx) -> None:
    _send(messages, make_ctx, "u1", "u2")
    _send(messages, make_ctx, "u2", "u1")

    assert partnerships.get_relationship_stats(make_ctx("u1")).current_streak == 1


def test_store_timezone_decides_the_day(db_session, paired, make_ctx) -> None:
    """01:00 UTC and 23:00 UTC on the same UTC date are different days in New York."""
    new_york = ZoneInfo("America/New_York")
    store = MessageStore(db_session, streaks=StreakCalculator(db_session, zone=new_york))
    early = datetime(2024, 6, 15, 1, 0, tzinfo=UTC)  # 21:00 on the 14th in New York
    late = datetime(2024, 6, 15, 23, 0, tzinfo=UTC)  # 19:00 on the 15th in New York

    _send(store, make_ctx, "u1", "u2", now=early)
    _send(store, make_ctx, "u2", "u1", now=late)
    assert paired.current_streak == 0

    _send(store, make_ctx, "u1", "u2", now=late + timedelta(minutes=5))
    assert paired.current_streak == 1
    assert paired.last_streak_date == date(2024, 6, 15)


def test_update_without_partnership_is_noop(db_session, now) -> None:
    calculator = StreakCalculator(db_session)
    assert calculator.update_streak("u7", "u8", now) is None
