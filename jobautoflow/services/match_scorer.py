"""
Profile-to-job match scoring.

The AI strategy asks the LLM for a JSON verdict; whenever that fails for any
reason the deterministic weighted scorer answers instead, so callers always
get a MatchResult.
"""
import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from types import SimpleNamespace
from typing import Any, Callable, Iterable

from jobautoflow.config import settings
from jobautoflow.services.llm_client import is_llm_enabled, llm_score_match

logger = logging.getLogger(__name__)

AIScorer = Callable[[str, str], dict[str, Any]]

GENERIC_REASON = "General profile match"

# Minimum years of experience implied by each job level.
EXPERIENCE_YEARS = {"entry": 0, "mid": 3, "senior": 5, "executive": 8}

# Integer weights (percent) so the weighted sum stays exact.
WEIGHT_SKILLS = 40
WEIGHT_EXPERIENCE = 20
WEIGHT_SALARY = 20
WEIGHT_LOCATION = 10
WEIGHT_TITLE = 10

REMOTE_LOCATION_SCORE = 80

PROFILE_FIELDS = (
    "user_id",
    "headline",
    "summary",
    "skills",
    "experience_years",
    "preferred_roles",
    "industries",
    "location",
    "salary_min",
    "salary_max",
    "salary_currency",
)
JOB_FIELDS = (
    "id",
    "title",
    "company",
    "description",
    "skills_required",
    "experience_level",
    "location",
    "location_type",
    "salary_min",
    "salary_max",
    "salary_currency",
    "job_type",
)

SYSTEM_PROMPT = (
    "You are an expert job matching AI. Analyze the candidate profile and job description "
    "to calculate a match score (0-100) and provide detailed reasoning. "
    "Return ONLY a JSON object with no markdown formatting."
)


@dataclass
class MatchDetails:
    skills_match: int = 0
    experience_match: int = 0
    salary_match: int = 0
    location_match: int = 0
    overall_fit: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class MatchResult:
    score: int
    reasons: list[str]
    details: MatchDetails = field(default_factory=MatchDetails)
    source: str = "fallback"  # ai | fallback

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "reasons": list(self.reasons),
            "details": self.details.to_dict(),
            "source": self.source,
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, _round_half_up(value)))


def _clean_list(values: Iterable[Any] | None) -> list[str]:
    return [str(v).strip() for v in (values or []) if v is not None and str(v).strip()]


def _snapshot(obj: Any, fields: tuple[str, ...]) -> SimpleNamespace:
    """Copy the attributes scoring reads so worker threads never touch a DB session."""
    return SimpleNamespace(**{name: getattr(obj, name, None) for name in fields})


def _fmt_list(values: Iterable[Any] | None) -> str:
    items = _clean_list(values)
    return ", ".join(items) if items else "N/A"


def _fmt_salary(salary_min: int | None, salary_max: int | None, currency: str | None = None) -> str:
    if not salary_min:
        return "N/A"
    band = f"${salary_min}-{salary_max if salary_max else 'N/A'}"
    return f"{band} {currency}" if currency else band


def build_matching_prompt(profile: Any, job: Any) -> str:
    max_chars = settings.match_description_max_chars
    description = job.description or ""
    if len(description) > max_chars:
        description = description[:max_chars] + "..."
    experience_years = profile.experience_years if profile.experience_years is not None else "N/A"

    return f"""
Analyze the following candidate profile and job posting to calculate a match score.

CANDIDATE PROFILE:
- Headline: {profile.headline or 'N/A'}
- Summary: {profile.summary or 'N/A'}
- Skills: {_fmt_list(profile.skills)}
- Experience Years: {experience_years}
- Preferred Roles: {_fmt_list(profile.preferred_roles)}
- Location: {profile.location or 'N/A'}
- Salary Expectation: {_fmt_salary(profile.salary_min, profile.salary_max)}
- Industries: {_fmt_list(profile.industries)}

JOB POSTING:
- Title: {job.title or 'N/A'}
- Company: {job.company or 'N/A'}
- Description: {description or 'N/A'}
- Required Skills: {_fmt_list(job.skills_required)}
- Experience Level: {job.experience_level or 'N/A'}
- Location: {job.location or 'N/A'} ({job.location_type or 'N/A'})
- Salary Range: {_fmt_salary(job.salary_min, job.salary_max, job.salary_currency)}
- Job Type: {job.job_type or 'N/A'}

Calculate a match score (0-100) and provide:
1. Overall match score
2. Top 3-5 reasons for the match
3. Breakdown scores (0-100) for: skills match, experience match, salary match, location match, overall fit

Return ONLY a JSON object in this exact format:
{{
  "score": number,
  "reasons": ["reason1", "reason2"],
  "details": {{
    "skills_match": number,
    "experience_match": number,
    "salary_match": number,
    "location_match": number,
    "overall_fit": number
  }}
}}
"""


def _result_from_ai(raw: dict[str, Any]) -> MatchResult:
    """Validate and normalize the model's JSON. Raises ValueError/TypeError on bad shapes."""
    score = _clamp(float(raw["score"]))
    reasons_raw = raw["reasons"]
    if not isinstance(reasons_raw, list):
        raise ValueError("reasons must be a list")
    details_raw = raw["details"]
    if not isinstance(details_raw, dict):
        raise ValueError("details must be an object")

    details = MatchDetails(
        **{name: _clamp(float(details_raw.get(name) or 0)) for name in MatchDetails.__dataclass_fields__}
    )
    reasons = _clean_list(reasons_raw) or [GENERIC_REASON]
    return MatchResult(score=score, reasons=reasons, details=details, source="ai")


def _skills_score(profile: Any, job: Any) -> tuple[int, int]:
    """(sub-score, number of required skills covered by the profile)."""
    profile_skills = [s.lower() for s in _clean_list(profile.skills)]
    required = [s.lower() for s in _clean_list(job.skills_required)]
    if not profile_skills or not required:
        return 0, 0
    covered = sum(
        1 for req in required
        if any(skill in req or req in skill for skill in profile_skills)
    )
    return _clamp(covered / len(required) * 100), covered


def _experience_score(profile: Any, job: Any) -> tuple[int, bool]:
    years = profile.experience_years
    level = (job.experience_level or "").strip().lower()
    if years is None or not level:
        return 0, False
    years = max(0, years)
    required = EXPERIENCE_YEARS.get(level, 0)
    if years >= required:
        return 100, True
    return _clamp(years / required * 100), False


def _salary_score(profile: Any, job: Any) -> tuple[int, bool]:
    wanted = profile.salary_min
    offered = job.salary_max
    if not wanted or not offered:
        return 0, False
    if wanted <= offered:
        return 100, True
    return _clamp(offered / wanted * 100), False


def _location_score(profile: Any, job: Any) -> tuple[int, str | None]:
    profile_loc = (profile.location or "").strip().lower()
    job_loc = (job.location or "").strip().lower()
    if profile_loc and job_loc and (profile_loc in job_loc or job_loc in profile_loc):
        return 100, "Location matches preference"
    if (job.location_type or "").strip().lower() == "remote":
        return REMOTE_LOCATION_SCORE, "Remote position available"
    return 0, None


def _title_score(profile: Any, job: Any) -> int:
    title = (job.title or "").lower()
    roles = [r.lower() for r in _clean_list(profile.preferred_roles)]
    if title and any(role in title for role in roles):
        return 100
    return 0


def calculate_basic_match_score(profile: Any, job: Any) -> MatchResult:
    """
    Deterministic weighted score: skills 40%, experience 20%, salary 20%,
    location 10%, preferred-role title match 10%. Pure; missing fields score 0.
    """
    profile = _snapshot(profile, PROFILE_FIELDS)
    job = _snapshot(job, JOB_FIELDS)
    reasons: list[str] = []
    details = MatchDetails()

    details.skills_match, covered = _skills_score(profile, job)
    if covered:
        reasons.append(f"Matches {covered} required skills")

    details.experience_match, meets_experience = _experience_score(profile, job)
    if meets_experience:
        reasons.append("Experience level matches requirements")

    details.salary_match, salary_fits = _salary_score(profile, job)
    if salary_fits:
        reasons.append("Salary expectations align")

    details.location_match, location_reason = _location_score(profile, job)
    if location_reason:
        reasons.append(location_reason)

    details.overall_fit = _title_score(profile, job)
    if details.overall_fit:
        reasons.append("Job title matches preferred roles")

    weighted = (
        details.skills_match * WEIGHT_SKILLS
        + details.experience_match * WEIGHT_EXPERIENCE
        + details.salary_match * WEIGHT_SALARY
        + details.location_match * WEIGHT_LOCATION
        + details.overall_fit * WEIGHT_TITLE
    )
    score = min(100, (weighted + 50) // 100)

    return MatchResult(
        score=score,
        reasons=reasons or [GENERIC_REASON],
        details=details,
        source="fallback",
    )


def calculate_match_score(profile: Any, job: Any, ai_scorer: AIScorer | None = None) -> MatchResult:
    """
    Score one profile against one job. Uses the AI scorer when available and
    falls back to the deterministic scorer on any AI failure.
    """
    profile = _snapshot(profile, PROFILE_FIELDS)
    job = _snapshot(job, JOB_FIELDS)
    if ai_scorer is None:
        if not is_llm_enabled():
            return calculate_basic_match_score(profile, job)
        ai_scorer = llm_score_match

    try:
        raw = ai_scorer(build_matching_prompt(profile, job), SYSTEM_PROMPT)
        return _result_from_ai(raw)
    except Exception as e:
        logger.warning(
            "AI match scoring failed for user=%s job=%s, using fallback: %s",
            profile.user_id, job.id, e,
        )
        return calculate_basic_match_score(profile, job)


def batch_calculate_match_scores(
    profile: Any,
    jobs: list[Any],
    ai_scorer: AIScorer | None = None,
    batch_size: int | None = None,
    delay_seconds: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, MatchResult]:
    """
    Score many jobs for one profile. Jobs run concurrently in groups of
    batch_size with a fixed pause between groups. A job that cannot be scored
    at all is logged and left out; it never aborts the batch.
    """
    batch_size = max(1, batch_size or settings.match_batch_size)
    delay = settings.match_batch_delay_seconds if delay_seconds is None else delay_seconds
    profile = _snapshot(profile, PROFILE_FIELDS)
    snapshots = [_snapshot(job, JOB_FIELDS) for job in jobs]
    results: dict[str, MatchResult] = {}

    with ThreadPoolExecutor(max_workers=batch_size) as pool:
        for start in range(0, len(snapshots), batch_size):
            group = snapshots[start:start + batch_size]
            futures = [(job, pool.submit(calculate_match_score, profile, job, ai_scorer)) for job in group]
            for job, future in futures:
                try:
                    results[job.id] = future.result()
                except Exception as e:
                    logger.exception("Scoring job=%s failed: %s", job.id, e)
            if start + batch_size < len(snapshots) and delay > 0:
                sleep(delay)

    logger.info("Batch scored %d/%d jobs for user=%s", len(results), len(jobs), profile.user_id)
    return results
