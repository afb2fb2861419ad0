import jobautoflow.services.match_refresh_service as svc
from jobautoflow.models import JobMatchCache
from factories import make_job, make_match, make_profile, make_user


def test_refresh_without_profile(db):
    user = make_user(db)
    make_job(db)
    out = svc.refresh_matches_for_user(db, user.id)
    assert out["reason"] == "missing_profile"
    assert db.query(JobMatchCache).count() == 0


def test_refresh_scores_active_jobs_and_keeps_flags(db, monkeypatch):
    monkeypatch.setattr(svc.settings, "match_batch_delay_seconds", 0)
    user = make_user(db)
    make_profile(db, user.id)
    active = make_job(db, title="Backend Engineer")
    closed = make_job(db, title="Closed role", status="closed")
    make_match(db, user.id, active.id, None, favorite=True)

    out = svc.refresh_matches_for_user(db, user.id)

    assert out["jobs"] == 1
    assert out["scored"] == 1
    assert out["fallback_scored"] == 1
    entry = db.query(JobMatchCache).filter(JobMatchCache.job_id == active.id).one()
    assert entry.is_scored is True
    assert entry.is_favorite is True
    assert entry.match_source == "fallback"
    assert "Job title matches preferred roles" in entry.match_reasons
    assert db.query(JobMatchCache).filter(JobMatchCache.job_id == closed.id).count() == 0


def test_refresh_selected_job_ids_with_ai(db, monkeypatch):
    monkeypatch.setattr(svc.settings, "match_batch_delay_seconds", 0)
    user = make_user(db)
    make_profile(db, user.id)
    wanted = make_job(db, title="Wanted")
    make_job(db, title="Ignored")
    ai = lambda p, s: {"score": 73, "reasons": ["ok"], "details": {}}

    out = svc.refresh_matches_for_user(db, user.id, job_ids=[wanted.id], ai_scorer=ai)

    assert out["ai_scored"] == 1
    entries = db.query(JobMatchCache).all()
    assert [(e.job_id, e.match_score) for e in entries] == [(wanted.id, 73)]


def test_background_refresh_logs_and_closes_session(monkeypatch):
    class _Session:
        closed = False

        def close(self):
            self.closed = True

    session = _Session()
    monkeypatch.setattr(svc, "SessionLocal", lambda: session)

    def _boom(db, user_id):
        raise RuntimeError("db down")

    monkeypatch.setattr(svc, "refresh_matches_for_user", _boom)
    svc.refresh_matches_in_background("u1")
    assert session.closed is True
