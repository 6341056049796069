"""Tests for the Scoring Engine."""

import math

import pytest
from pydantic import ValidationError

from models.schemas.applicant_record import ApplicantRecord, EligibilityRecord
from models.schemas.applicant_score import (
    ALGORITHM_ENSEMBLE_BLEND,
    ALGORITHM_ENSEMBLE_TIEBREAK,
    ALGORITHM_SKILL_EXPERIENCE,
    ALGORITHM_WEIGHTED_SUM,
    ScoringStrategy,
    ScoringWeights,
)
from services.ranking.scoring import (
    composite_score,
    compute_title_relevance,
    dice_coefficient,
    experience_factor,
    select_match_score,
    score_applicant,
    score_batch,
    score_education,
    score_experience,
    score_token_overlap,
)

WEIGHTS = ScoringWeights()


class TestEducationScore:
    def test_no_requirement_is_full(self):
        assert score_education(0, 0)[0] == 100.0
        assert score_education(3, 0)[0] == 100.0

    def test_meets_requirement(self):
        assert score_education(4, 4) == (70.0, 0)

    def test_above_and_below(self):
        assert score_education(5, 4) == (85.0, 1)
        assert score_education(2, 4) == (30.0, -2)

    def test_clamped(self):
        assert score_education(0, 5)[0] == 0.0

    def test_monotonic(self):
        for required in range(1, 6):
            scores = [score_education(rank, required)[0] for rank in range(0, 6)]
            assert scores == sorted(scores)


class TestExperienceScore:
    def test_no_requirement_is_full(self):
        assert score_experience(0.0, 0.0) == 100.0

    def test_below_requirement(self):
        assert score_experience(1.0, 2.0) == 40.0
        assert score_experience(0.0, 2.0) == 0.0

    def test_meeting_requirement(self):
        assert score_experience(2.0, 2.0) == 80.0
        assert score_experience(3.0, 2.0) == 90.0
        assert score_experience(10.0, 2.0) == 100.0

    def test_monotonic(self):
        years = [0, 0.5, 1, 1.9, 2, 2.5, 4, 8]
        scores = [score_experience(y, 2.0) for y in years]
        assert scores == sorted(scores)
        assert all(0.0 <= s <= 100.0 for s in scores)


class TestTokenOverlap:
    def test_no_requirement_is_full(self):
        assert score_token_overlap({"excel": "Excel"}, []) == (100.0, [], [])

    def test_case_insensitive(self):
        score, matched, missing = score_token_overlap(
            {"excel": "excel", "sql": "SQL"}, ["Excel", "Payroll"]
        )
        assert score == 50.0
        assert matched == ["Excel"]
        assert missing == ["Payroll"]

    def test_duplicate_tokens_count_once(self):
        score, matched, missing = score_token_overlap(
            {"sql": "SQL"}, ["SQL", "sql", "SQL "]
        )
        assert score == 100.0
        assert matched == ["SQL"]
        assert missing == []

    def test_bounded(self):
        tokens = {"a": "a", "b": "b", "c": "c"}
        score, matched, _ = score_token_overlap(tokens, ["a"])
        assert score == 100.0
        assert len(matched) == 1


class TestWeights:
    def test_defaults_sum_to_one(self):
        assert sum(WEIGHTS.as_dict().values()) == pytest.approx(1.0)

    def test_rejects_bad_sum(self):
        with pytest.raises(ValidationError):
            ScoringWeights(education=0.5, experience=0.5, skills=0.5, eligibility=0.5)

    def test_rejects_negative(self):
        with pytest.raises(ValidationError):
            ScoringWeights(education=-0.1, experience=0.5, skills=0.4, eligibility=0.2)

    def test_composite(self):
        assert composite_score(100, 100, 100, 100, WEIGHTS) == 100.0
        assert composite_score(70, 40, 50, 0, WEIGHTS) == 43.5


class TestTitleRelevance:
    def test_overlap(self):
        relevance, titles = compute_title_relevance(
            "Bookkeeper", ["Bookkeeper", "Sales Clerk"], ["bookkeeper", "sales", "clerk"]
        )
        assert relevance == 1.0
        assert titles == ["Bookkeeper"]

    def test_no_work_history(self):
        assert compute_title_relevance("Bookkeeper", [], []) == (0.0, [])


class TestScoreApplicant:
    def test_full_breakdown(self, make_job):
        job = make_job(
            degree_requirement="COLLEGE",
            skills=["Excel", "SQL"],
            eligibilities=["Career Service Professional"],
            years_of_experience=2,
        )
        record = ApplicantRecord(
            application_id="a1",
            highest_educational_attainment="COLLEGE - BS Accountancy",
            total_years_experience=1.0,
            skills=["excel"],
            eligibilities=[EligibilityRecord(eligibility_title="career service professional")],
        )
        score = score_applicant(job, record, WEIGHTS)
        assert score.education_score == 70.0
        assert score.experience_score == 40.0
        assert score.skills_score == 50.0
        assert score.eligibility_score == 100.0
        # 0.3*70 + 0.25*40 + 0.25*50 + 0.2*100
        assert score.match_score == 63.5
        assert score.matched_skills == ["Excel"]
        assert score.missing_skills == ["SQL"]
        assert score.matched_skills_count == 1
        assert score.matched_eligibilities_count == 1

    def test_title_relevance_does_not_move_score(self, make_job):
        job = make_job(title="Bookkeeper")
        plain = ApplicantRecord(application_id="a1")
        related = ApplicantRecord(application_id="a2", work_experience_titles=["Bookkeeper"])
        assert score_applicant(job, plain, WEIGHTS).match_score == \
            score_applicant(job, related, WEIGHTS).match_score

    def test_unrecognized_degree_treated_as_none(self, make_job):
        job = make_job(degree_requirement="Something Unusual")
        score = score_applicant(job, ApplicantRecord(application_id="a1"), WEIGHTS)
        assert score.education_score == 100.0
        assert score.required_level == ""

    def test_batch_keeps_order(self, make_job):
        job = make_job(skills=["Excel"])
        records = [
            ApplicantRecord(application_id="a1"),
            ApplicantRecord(application_id="a2", skills=["Excel"]),
        ]
        scored = score_batch(job, records, WEIGHTS)
        assert [r.application_id for r, _ in scored] == ["a1", "a2"]
        assert [s.skills_score for _, s in scored] == [0.0, 100.0]


class TestStrategyParts:
    def test_dice(self):
        assert dice_coefficient(1, 1, 2) == pytest.approx(66.667, abs=0.01)
        assert dice_coefficient(2, 2, 2) == 100.0
        assert dice_coefficient(0, 0, 2) == 0.0

    def test_dice_no_requirement_is_full(self):
        assert dice_coefficient(0, 3, 0) == 100.0

    def test_experience_factor(self):
        assert experience_factor(0, 2) == pytest.approx(math.exp(-1))
        assert experience_factor(4, 2) == pytest.approx(1.0)
        assert experience_factor(10, 2) == pytest.approx(1.0)
        assert experience_factor(3, 0) == 1.0

    def test_experience_factor_monotonic(self):
        factors = [experience_factor(y / 2, 2) for y in range(0, 12)]
        assert factors == sorted(factors)

    def test_select_weighted_sum(self):
        assert select_match_score(ScoringStrategy.WEIGHTED_SUM, 60.0, 90.0, 10.0) == (
            60.0, ALGORITHM_WEIGHTED_SUM
        )

    def test_select_ensemble_tie_band_edge(self):
        assert select_match_score(ScoringStrategy.ENSEMBLE, 60.0, 65.0, 10.0) == (
            10.0, ALGORITHM_ENSEMBLE_TIEBREAK
        )
        score, algorithm = select_match_score(ScoringStrategy.ENSEMBLE, 60.0, 65.5, 10.0)
        assert algorithm == ALGORITHM_ENSEMBLE_BLEND
        assert score == pytest.approx(62.2)


class TestScoringStrategies:
    def _job(self, make_job):
        return make_job(
            degree_requirement="COLLEGE",
            skills=["Excel", "SQL"],
            eligibilities=["Career Service Professional"],
            years_of_experience=2,
        )

    def _record(self):
        return ApplicantRecord(
            application_id="a1",
            highest_educational_attainment="COLLEGE - BS Accountancy",
            total_years_experience=1.0,
            skills=["excel"],
            eligibilities=[EligibilityRecord(eligibility_title="career service professional")],
        )

    def test_skill_experience(self, make_job):
        score = score_applicant(
            self._job(make_job), self._record(), WEIGHTS,
            strategy=ScoringStrategy.SKILL_EXPERIENCE,
        )
        # 0.40 * 66.67 * e^-0.75 + 0.35 * 70 + 0.25 * 100
        assert score.match_score == pytest.approx(62.1, abs=0.01)
        assert score.algorithm_used == ALGORITHM_SKILL_EXPERIENCE

    def test_ensemble_close_scores_use_tiebreaker(self, make_job):
        score = score_applicant(
            self._job(make_job), self._record(), WEIGHTS, strategy=ScoringStrategy.ENSEMBLE,
        )
        # 63.5 vs 62.1: within 5 points
        # 0.40*100 + 0.30*70 + 0.20*40 + 0.10*50
        assert score.match_score == 74.0
        assert score.algorithm_used == ALGORITHM_ENSEMBLE_TIEBREAK
        assert score.strategy_scores["weightedSum"] == 63.5
        assert score.strategy_scores["tieBreaker"] == 74.0

    def test_ensemble_distant_scores_blend(self, make_job):
        job = make_job(skills=["Excel", "SQL"], years_of_experience=2)
        record = ApplicantRecord(
            application_id="a1",
            total_years_experience=4.0,
            skills=["Excel", "SQL", "Python", "Word", "Access", "Java"],
        )
        score = score_applicant(job, record, WEIGHTS, strategy=ScoringStrategy.ENSEMBLE)
        # weighted 100, skill-experience 0.40*50 + 35 + 25 = 80
        assert score.strategy_scores["skillExperience"] == pytest.approx(80.0)
        assert score.match_score == pytest.approx(92.0)
        assert score.algorithm_used == ALGORITHM_ENSEMBLE_BLEND

    @pytest.mark.parametrize("strategy", list(ScoringStrategy))
    def test_components_identical_across_strategies(self, make_job, strategy):
        job = self._job(make_job)
        base = score_applicant(job, self._record(), WEIGHTS)
        other = score_applicant(job, self._record(), WEIGHTS, strategy=strategy)
        assert (other.education_score, other.experience_score, other.skills_score,
                other.eligibility_score) == (base.education_score, base.experience_score,
                                             base.skills_score, base.eligibility_score)

    @pytest.mark.parametrize("strategy", list(ScoringStrategy))
    def test_no_requirements_is_full(self, make_job, strategy):
        record = ApplicantRecord(application_id="a1", skills=["Typing"])
        score = score_applicant(make_job(), record, WEIGHTS, strategy=strategy)
        assert score.match_score == 100.0

    def test_skill_experience_monotonic_in_years(self, make_job):
        job = self._job(make_job)
        scores = [
            score_applicant(
                job, self._record().model_copy(update={"total_years_experience": y / 2}),
                WEIGHTS, strategy=ScoringStrategy.SKILL_EXPERIENCE,
            ).match_score
            for y in range(0, 12)
        ]
        assert scores == sorted(scores)

    def test_batch_passes_strategy(self, make_job):
        scored = score_batch(
            make_job(), [ApplicantRecord(application_id="a1")], WEIGHTS,
            ScoringStrategy.SKILL_EXPERIENCE,
        )
        assert scored[0][1].algorithm_used == ALGORITHM_SKILL_EXPERIENCE
