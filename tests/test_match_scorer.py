from types import SimpleNamespace

import pytest

import jobautoflow.services.match_scorer as scorer
from jobautoflow.core.errors import AIScoringUnavailable


def _profile(**kwargs):
    data = {
        "user_id": "u1",
        "headline": None,
        "summary": None,
        "skills": ["JavaScript", "React"],
        "experience_years": 4,
        "preferred_roles": ["Frontend Engineer"],
        "industries": [],
        "location": "Remote",
        "salary_min": 80000,
        "salary_max": None,
        "salary_currency": "USD",
    }
    data.update(kwargs)
    return SimpleNamespace(**data)


def _job(**kwargs):
    data = {
        "id": "j1",
        "title": "Frontend Engineer",
        "company": "ACME",
        "description": "Build UIs",
        "skills_required": ["React", "TypeScript"],
        "experience_level": "mid",
        "location": None,
        "location_type": "remote",
        "salary_min": None,
        "salary_max": 90000,
        "salary_currency": "USD",
        "job_type": "full_time",
    }
    data.update(kwargs)
    return SimpleNamespace(**data)


def _empty_profile():
    return _profile(skills=[], experience_years=None, preferred_roles=[], location=None, salary_min=None)


def _empty_job():
    return _job(title="", skills_required=[], experience_level=None, location=None, location_type=None, salary_max=None)


def test_frontend_example_scores_78():
    result = scorer.calculate_basic_match_score(_profile(), _job())
    assert result.details.skills_match == 50
    assert result.details.experience_match == 100
    assert result.details.salary_match == 100
    assert result.details.location_match == 80
    assert result.details.overall_fit == 100
    assert result.score == 78
    assert result.source == "fallback"
    assert result.reasons == [
        "Matches 1 required skills",
        "Experience level matches requirements",
        "Salary expectations align",
        "Remote position available",
        "Job title matches preferred roles",
    ]


def test_fallback_is_pure():
    profile, job = _profile(), _job()
    first = scorer.calculate_basic_match_score(profile, job)
    second = scorer.calculate_basic_match_score(profile, job)
    assert first.to_dict() == second.to_dict()


def test_zero_skill_overlap_scores_zero():
    result = scorer.calculate_basic_match_score(_profile(skills=["Go", "Rust"]), _job())
    assert result.details.skills_match == 0


def test_skill_matching_is_case_insensitive_substring_both_ways():
    result = scorer.calculate_basic_match_score(
        _profile(skills=["react.js", "TYPESCRIPT"]),
        _job(skills_required=["React", "typescript"]),
    )
    assert result.details.skills_match == 100


def test_title_bonus_when_role_equals_title():
    result = scorer.calculate_basic_match_score(
        _profile(preferred_roles=["Data Engineer"]),
        _job(title="Data Engineer"),
    )
    assert result.details.overall_fit == 100


@pytest.mark.parametrize(
    "profile,job",
    [
        (_empty_profile(), _empty_job()),
        (_profile(), _empty_job()),
        (_empty_profile(), _job()),
        (_profile(experience_years=-3, salary_min=1), _job(salary_max=10_000_000)),
        (_profile(salary_min=500000), _job(salary_max=1)),
    ],
)
def test_score_is_integer_in_range(profile, job):
    result = scorer.calculate_basic_match_score(profile, job)
    assert isinstance(result.score, int)
    assert 0 <= result.score <= 100
    for value in result.details.to_dict().values():
        assert 0 <= value <= 100


def test_empty_inputs_get_generic_reason():
    result = scorer.calculate_basic_match_score(_empty_profile(), _empty_job())
    assert result.score == 0
    assert result.reasons == [scorer.GENERIC_REASON]


def test_entry_level_with_zero_years_meets_requirement():
    result = scorer.calculate_basic_match_score(_profile(experience_years=0), _job(experience_level="entry"))
    assert result.details.experience_match == 100


def test_partial_experience_and_salary():
    result = scorer.calculate_basic_match_score(
        _profile(experience_years=2, salary_min=100000),
        _job(experience_level="senior", salary_max=75000),
    )
    assert result.details.experience_match == 40
    assert result.details.salary_match == 75


def test_location_substring_beats_remote():
    result = scorer.calculate_basic_match_score(
        _profile(location="Austin"),
        _job(location="Austin, TX", location_type="onsite"),
    )
    assert result.details.location_match == 100
    assert "Location matches preference" in result.reasons


def test_onsite_mismatch_scores_zero_location():
    result = scorer.calculate_basic_match_score(
        _profile(location="Boston"),
        _job(location="Denver", location_type="onsite"),
    )
    assert result.details.location_match == 0


def test_prompt_truncates_description():
    job = _job(description="x" * 1500)
    prompt = scorer.build_matching_prompt(_profile(), job)
    assert "x" * 1000 + "..." in prompt
    assert "x" * 1001 not in prompt


def test_ai_result_used_when_valid():
    def ai(prompt, system_prompt):
        assert system_prompt == scorer.SYSTEM_PROMPT
        return {
            "score": 91.6,
            "reasons": ["Strong React background"],
            "details": {"skills_match": 95, "experience_match": 90, "salary_match": 80, "location_match": 100, "overall_fit": 92},
        }

    result = scorer.calculate_match_score(_profile(), _job(), ai_scorer=ai)
    assert result.source == "ai"
    assert result.score == 92
    assert result.reasons == ["Strong React background"]
    assert result.details.location_match == 100


def test_ai_scores_are_clamped():
    ai = lambda p, s: {"score": 140, "reasons": [], "details": {"skills_match": -5}}
    result = scorer.calculate_match_score(_profile(), _job(), ai_scorer=ai)
    assert result.score == 100
    assert result.details.skills_match == 0
    assert result.reasons == [scorer.GENERIC_REASON]


@pytest.mark.parametrize(
    "ai",
    [
        lambda p, s: (_ for _ in ()).throw(AIScoringUnavailable("timeout")),
        lambda p, s: (_ for _ in ()).throw(RuntimeError("network")),
        lambda p, s: {"score": 80, "details": {}},
        lambda p, s: {"score": "high", "reasons": [], "details": {}},
        lambda p, s: {"score": 80, "reasons": "not-a-list", "details": {}},
    ],
)
def test_ai_failure_falls_back_to_deterministic(ai):
    result = scorer.calculate_match_score(_profile(), _job(), ai_scorer=ai)
    assert result.source == "fallback"
    assert result.score == 78


def test_llm_disabled_uses_fallback_without_calling_model(monkeypatch):
    monkeypatch.setattr(scorer, "is_llm_enabled", lambda: False)
    monkeypatch.setattr(scorer, "llm_score_match", lambda p, s: pytest.fail("model should not be called"))
    result = scorer.calculate_match_score(_profile(), _job())
    assert result.source == "fallback"


def test_llm_enabled_uses_default_client(monkeypatch):
    monkeypatch.setattr(scorer, "is_llm_enabled", lambda: True)
    monkeypatch.setattr(
        scorer,
        "llm_score_match",
        lambda p, s: {"score": 60, "reasons": ["ok"], "details": {}},
    )
    result = scorer.calculate_match_score(_profile(), _job())
    assert result.source == "ai"
    assert result.score == 60


def test_batch_groups_and_sleeps_between_groups_only():
    jobs = [_job(id=f"j{i}") for i in range(12)]
    sleeps = []
    results = scorer.batch_calculate_match_scores(
        _profile(),
        jobs,
        ai_scorer=lambda p, s: {"score": 70, "reasons": ["r"], "details": {}},
        batch_size=5,
        delay_seconds=1.0,
        sleep=sleeps.append,
    )
    assert set(results) == {f"j{i}" for i in range(12)}
    assert sleeps == [1.0, 1.0]
    assert all(r.score == 70 for r in results.values())


def test_batch_single_group_never_sleeps():
    sleeps = []
    scorer.batch_calculate_match_scores(
        _profile(), [_job(id="a"), _job(id="b")], batch_size=5, delay_seconds=2.0, sleep=sleeps.append,
    )
    assert sleeps == []


def test_batch_one_ai_failure_only_affects_that_job():
    def ai(prompt, system_prompt):
        if "Title: Broken" in prompt:
            raise AIScoringUnavailable("bad json")
        return {"score": 65, "reasons": ["ok"], "details": {}}

    jobs = [_job(id="good"), _job(id="bad", title="Broken")]
    results = scorer.batch_calculate_match_scores(_profile(), jobs, ai_scorer=ai, delay_seconds=0)
    assert results["good"].source == "ai"
    assert results["bad"].source == "fallback"
