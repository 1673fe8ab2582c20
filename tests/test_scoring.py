"""Tests for the scoring engine."""
import math

import pytest

from scorecard.evaluation import ScoringEngine
from scorecard.models import Category, CategoryScore, EvidenceSet
from tests.conftest import action, make_records, promise


def evidence_of(*items, source="fake"):
    records = make_records(items, source=source)
    return EvidenceSet(
        legislative_actions=[r for r in records if r.kind == "legislative_action"],
        campaign_promises=[r for r in records if r.kind == "campaign_promise"],
        sources_queried=[source],
    )


@pytest.fixture
def engine(settings):
    return ScoringEngine(settings)


def test_single_sponsored_positive_action(engine):
    score = engine.score("D000001", evidence_of(action(category="healthcare")))

    assert [cs.category for cs in score.category_scores] == [Category.HEALTHCARE]
    healthcare = score.category(Category.HEALTHCARE)
    assert healthcare.score == pytest.approx(100.0)
    assert healthcare.data_points == 1
    assert healthcare.confidence == pytest.approx(1 - math.exp(-1 / 5))
    assert score.overall_score == pytest.approx(100.0)
    # Nine uncovered categories shrink confidence well below the category's own
    assert score.confidence < healthcare.confidence
    assert score.data_points == 1


def test_action_multipliers_weight_the_category_score(engine):
    evidence = evidence_of(
        action("H.R. 1", action="sponsored", impact="positive"),
        action("H.R. 2", action="abstained", impact="negative"),
    )
    healthcare = engine.score("D000001", evidence).category(Category.HEALTHCARE)
    # (1.0 * 1 + 0.2 * -1) / (1.0 + 0.2)
    assert healthcare.score == pytest.approx(66.6667, abs=1e-3)


def test_neutral_impact_pulls_score_toward_zero(engine):
    evidence = evidence_of(
        action("H.R. 1", action="voted_for", impact="positive"),
        action("H.R. 2", action="voted_for", impact="neutral"),
    )
    assert engine.score("x", evidence).category(Category.HEALTHCARE).score == pytest.approx(50.0)


def test_promise_statuses_score(engine):
    partial = engine.score("x", evidence_of(promise("p1", status="partially_fulfilled")))
    assert partial.category(Category.EDUCATION).score == pytest.approx(50.0)

    broken = engine.score("x", evidence_of(promise("p1", status="broken")))
    assert broken.category(Category.EDUCATION).score == pytest.approx(-100.0)

    pending = engine.score("x", evidence_of(promise("p1", status="pending")))
    assert pending.category(Category.EDUCATION).score == pytest.approx(0.0)


def test_categories_without_evidence_are_omitted(engine):
    evidence = evidence_of(action(category="security"), promise(category="education"))
    score = engine.score("x", evidence)
    assert {cs.category for cs in score.category_scores} == {Category.SECURITY, Category.EDUCATION}
    assert score.category(Category.ECONOMIC) is None


def test_category_order_follows_category_enum(engine):
    evidence = evidence_of(
        action("H.R. 1", category="transparency"),
        action("H.R. 2", category="economic"),
        action("H.R. 3", category="healthcare"),
    )
    order = [cs.category for cs in engine.score("x", evidence).category_scores]
    assert order == [Category.ECONOMIC, Category.HEALTHCARE, Category.TRANSPARENCY]


def test_confidence_grows_with_evidence(engine):
    previous = 0.0
    for n in range(1, 30):
        current = engine.category_confidence(n)
        assert previous < current < 1.0
        previous = current
    assert engine.category_confidence(0) == 0.0


def test_more_evidence_never_lowers_category_confidence(engine):
    few = engine.score("x", evidence_of(*[action(f"H.R. {i}") for i in range(2)]))
    many = engine.score("x", evidence_of(*[action(f"H.R. {i}") for i in range(12)]))
    assert many.category(Category.HEALTHCARE).confidence > few.category(Category.HEALTHCARE).confidence


def test_broader_coverage_raises_overall_confidence(engine):
    narrow = engine.score("x", evidence_of(*[action(f"H.R. {i}") for i in range(10)]))
    broad_items = [
        action(f"H.R. {i}-{name}", category=name)
        for name in ("economic", "healthcare", "education", "security", "environmental")
        for i in range(10)
    ]
    broad = engine.score("x", evidence_of(*broad_items))
    assert broad.confidence > narrow.confidence


def test_confidence_capped_by_weakest_nontrivial_category(engine):
    items = [action(f"H.R. {i}", category="healthcare") for i in range(20)]
    items.append(action("S. 1", category="economic"))
    score = engine.score("x", evidence_of(*items))

    economic = score.category(Category.ECONOMIC)
    assert score.confidence <= economic.confidence + 1e-9


def test_empty_evidence_scores_zero(engine):
    score = engine.score("x", EvidenceSet())
    assert score.category_scores == []
    assert score.overall_score == 0.0
    assert score.confidence == 0.0
    assert score.data_points == 0


def test_scores_stay_within_bounds(engine):
    items = [action(f"H.R. {i}", impact="negative", category="civil_rights") for i in range(50)]
    items += [promise(f"p{i}", status="fulfilled", category="economic") for i in range(50)]
    score = engine.score("x", evidence_of(*items))
    assert -100.0 <= score.overall_score <= 100.0
    assert 0.0 <= score.confidence <= 1.0
    for cs in score.category_scores:
        assert -100.0 <= cs.score <= 100.0
        assert 0.0 <= cs.confidence <= 1.0


def test_overall_uses_effective_weights(engine):
    strong = CategoryScore(category=Category.ECONOMIC, score=80.0, weight=0.1, confidence=0.9)
    weak = CategoryScore(category=Category.SECURITY, score=-40.0, weight=0.1, confidence=0.3)
    overall, _ = engine.overall([strong, weak])
    assert overall == pytest.approx((0.09 * 80.0 + 0.03 * -40.0) / 0.12)


def test_zero_weight_categories_do_not_count(settings):
    weights = dict(settings.CATEGORY_WEIGHTS, security=0.0)
    engine = ScoringEngine(settings.model_copy(update={"CATEGORY_WEIGHTS": weights}))
    evidence = evidence_of(
        action("H.R. 1", category="economic", impact="positive"),
        action("H.R. 2", category="security", impact="negative"),
    )
    score = engine.score("x", evidence)
    assert score.overall_score == pytest.approx(100.0)


def test_citations_are_collected_per_category(engine):
    evidence = evidence_of(
        action("H.R. 1", evidence=["https://a.example/1", "https://a.example/2"]),
        action("H.R. 2", evidence=["https://a.example/2"]),
    )
    healthcare = engine.score("x", evidence).category(Category.HEALTHCARE)
    assert healthcare.evidence == ["https://a.example/1", "https://a.example/2"]
    assert healthcare.sources == ["fake"]


def test_record_value_rejects_unknown_types():
    with pytest.raises(TypeError):
        ScoringEngine.record_value(object())
