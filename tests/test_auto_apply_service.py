from datetime import datetime, timedelta, timezone

import pytest

import jobautoflow.services.auto_apply_service as svc
from jobautoflow.core.errors import AutoApplyDisabled, RateLimitExceeded
from jobautoflow.core.security import generate_id
from jobautoflow.models import Application, Job, Notification
from factories import make_job, make_match, make_preferences, make_user


def _add_application(db, user_id, job_id, auto=True, created_at=None):
    app = Application(
        id=generate_id(),
        user_id=user_id,
        job_id=job_id,
        status="pending",
        is_auto_applied=auto,
        match_reasons=[],
        created_at=created_at or datetime.now(timezone.utc),
    )
    db.add(app)
    db.commit()
    return app


def _applications(db, user_id):
    return db.query(Application).filter(Application.user_id == user_id).all()


def test_disabled_raises_regardless_of_cache(db):
    user = make_user(db)
    job = make_job(db)
    make_match(db, user.id, job.id, 99)
    make_preferences(db, user.id, enabled=False)
    with pytest.raises(AutoApplyDisabled):
        svc.run_auto_apply(db, user.id)
    assert _applications(db, user.id) == []


def test_missing_preferences_is_disabled(db):
    user = make_user(db)
    with pytest.raises(AutoApplyDisabled):
        svc.run_auto_apply(db, user.id)


def test_cap_reached_raises_rate_limit(db):
    user = make_user(db)
    make_preferences(db, user.id, max_per_day=2)
    for i in range(2):
        _add_application(db, user.id, make_job(db, title=f"Done {i}").id)
    make_match(db, user.id, make_job(db).id, 90)
    with pytest.raises(RateLimitExceeded):
        svc.run_auto_apply(db, user.id)


def test_creates_at_most_remaining_quota_best_first(db):
    user = make_user(db)
    make_preferences(db, user.id, threshold=50, max_per_day=3)
    _add_application(db, user.id, make_job(db, title="Earlier").id)
    scored = {}
    for score in (95, 85, 75, 65, 45):
        job = make_job(db, title=f"Job {score}")
        make_match(db, user.id, job.id, score)
        scored[score] = job.id

    result = svc.run_auto_apply(db, user.id)

    assert result.applications_created == 2
    assert [j["id"] for j in result.jobs] == [scored[95], scored[85]]
    assert result.skipped == []
    auto = [a for a in _applications(db, user.id) if a.job_id in scored.values()]
    assert {a.job_id for a in auto} == {scored[95], scored[85]}
    assert all(a.is_auto_applied and a.status == "pending" for a in auto)


def test_only_todays_auto_applications_count_toward_cap(db):
    user = make_user(db)
    make_preferences(db, user.id, max_per_day=1)
    yesterday = datetime.now(timezone.utc) - timedelta(days=1, hours=1)
    _add_application(db, user.id, make_job(db, title="Old").id, created_at=yesterday)
    _add_application(db, user.id, make_job(db, title="Manual").id, auto=False)
    make_match(db, user.id, make_job(db, title="New").id, 80)

    result = svc.run_auto_apply(db, user.id)
    assert result.applications_created == 1


def test_excludes_already_applied_hidden_and_unscored(db):
    user = make_user(db)
    make_preferences(db, user.id, threshold=50, max_per_day=10)
    applied = make_job(db, title="Applied")
    hidden = make_job(db, title="Hidden")
    unscored = make_job(db, title="Unscored")
    fresh = make_job(db, title="Fresh")
    make_match(db, user.id, applied.id, 90)
    _add_application(db, user.id, applied.id, auto=False)
    make_match(db, user.id, hidden.id, 95, hidden=True)
    make_match(db, user.id, unscored.id, None, favorite=True)
    make_match(db, user.id, fresh.id, 70)

    result = svc.run_auto_apply(db, user.id)

    assert [j["id"] for j in result.jobs] == [fresh.id]
    job_ids = [a.job_id for a in _applications(db, user.id)]
    assert job_ids.count(applied.id) == 1
    assert hidden.id not in job_ids
    assert unscored.id not in job_ids


def test_copies_stored_reasons_and_score(db):
    user = make_user(db)
    make_preferences(db, user.id)
    job = make_job(db)
    make_match(db, user.id, job.id, 77, reasons=["Matches 2 required skills", "Remote position available"])

    svc.run_auto_apply(db, user.id)

    app = _applications(db, user.id)[0]
    assert app.match_score == 77
    assert app.match_reasons == ["Matches 2 required skills", "Remote position available"]


def test_legacy_entry_without_reasons_uses_detail_keys(db):
    user = make_user(db)
    make_preferences(db, user.id)
    job = make_job(db)
    make_match(db, user.id, job.id, 77, reasons=[])

    svc.run_auto_apply(db, user.id)
    assert _applications(db, user.id)[0].match_reasons == ["skills_match"]


def test_duplicate_race_is_skipped_and_batch_continues(db, monkeypatch):
    user = make_user(db)
    make_preferences(db, user.id)
    raced = make_job(db, title="Raced")
    other = make_job(db, title="Other")
    make_match(db, user.id, raced.id, 90)
    make_match(db, user.id, other.id, 80)
    # Another request created this application after the exclusion read.
    _add_application(db, user.id, raced.id, auto=False)
    monkeypatch.setattr(svc, "get_applied_job_ids", lambda db_, uid, ids: set())

    result = svc.run_auto_apply(db, user.id)

    assert result.applications_created == 1
    assert result.skipped == [raced.id]
    assert len(result.warnings) == 1
    assert [j["id"] for j in result.jobs] == [other.id]
    assert db.query(Job).filter(Job.id == raced.id).one().application_count == 0
    assert db.query(Job).filter(Job.id == other.id).one().application_count == 1


def test_notification_only_when_something_was_created(db):
    user = make_user(db)
    make_preferences(db, user.id)
    result = svc.run_auto_apply(db, user.id)
    assert result.applications_created == 0
    assert db.query(Notification).count() == 0

    make_match(db, user.id, make_job(db).id, 88)
    svc.run_auto_apply(db, user.id)
    notes = db.query(Notification).all()
    assert len(notes) == 1
    assert notes[0].type == "auto_apply"


def test_start_of_utc_day_normalizes_timezones():
    pst = timezone(timedelta(hours=-8))
    now = datetime(2024, 3, 10, 20, 30, tzinfo=pst)
    assert svc.start_of_utc_day(now) == datetime(2024, 3, 11, tzinfo=timezone.utc)
    assert svc.start_of_utc_day(datetime(2024, 3, 10, 5, 0)) == datetime(2024, 3, 10, tzinfo=timezone.utc)
