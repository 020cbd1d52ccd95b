"""
Tests for the runtime types: validation and dict serialization.
"""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from conftest import make_decision, make_flavor

from stageswarm.runtime.types import (
    ArtifactQuality,
    ArtifactValue,
    DecisionInput,
    DecisionOutcome,
    DecisionType,
    FlavorExecutionResult,
    FlavorHintStrategy,
    GateResult,
    OrchestratorConfig,
    OrchestratorContext,
    RuleEffect,
    RuleInput,
    RuleSuggestion,
    StageRule,
    decision_from_dict,
    decision_outcome_from_dict,
    decision_outcome_to_dict,
    decision_to_dict,
    flavor_from_dict,
    flavor_to_dict,
    generate_id,
    is_stage_category,
    orchestrator_context_from_dict,
    rule_suggestion_from_dict,
    rule_suggestion_to_dict,
    stage_definition_from_dict,
    stage_rule_from_dict,
    stage_rule_to_dict,
)


class TestValidation:
    """Constructor-time validation."""

    def test_outcome_needs_at_least_one_field(self):
        with pytest.raises(ValueError):
            DecisionOutcome()
        assert DecisionOutcome(rework_required=False).rework_required is False

    @pytest.mark.parametrize(
        "overrides",
        [{"options": []}, {"selection": ""}, {"confidence": 1.2}, {"confidence": -0.1}],
    )
    def test_decision_input_rejects_bad_values(self, overrides):
        fields = dict(
            stage_category="build",
            decision_type=DecisionType.RETRY,
            context={},
            options=["retry", "abort"],
            selection="retry",
            reasoning="",
            confidence=0.5,
        )
        fields.update(overrides)
        with pytest.raises(ValueError):
            DecisionInput(**fields)

    def test_orchestrator_config_bounds(self):
        with pytest.raises(ValueError):
            OrchestratorConfig(confidence_threshold=1.5)
        with pytest.raises(ValueError):
            OrchestratorConfig(max_parallel_flavors=0)

    def test_stage_categories(self):
        assert is_stage_category("review")
        assert not is_stage_category("wrapup")

    def test_ids_are_unique(self):
        assert generate_id() != generate_id()


class TestDerivedValues:
    """Properties computed from stored fields."""

    def test_rule_weight(self):
        rule = StageRule(
            id="r1",
            category="build",
            name="bug-fix",
            condition="hotfix",
            effect=RuleEffect.BOOST,
            magnitude=0.4,
            confidence=0.5,
        )
        assert rule.weight == pytest.approx(0.2)

    @pytest.mark.parametrize(
        "artifact, expected",
        [
            (None, False),
            (ArtifactValue(name="out"), False),
            (ArtifactValue(name="out", value=0), True),
            (ArtifactValue(name="out", value=False), True),
        ],
    )
    def test_has_synthesis_value(self, artifact, expected):
        result = FlavorExecutionResult(flavor_name="f", synthesis_artifact=artifact)
        assert result.has_synthesis_value is expected

    def test_with_kataka(self):
        ctx = OrchestratorContext(active_kataka_id="run-agent")
        assert ctx.with_kataka(None) is ctx
        assert ctx.with_kataka("flavor-agent").active_kataka_id == "flavor-agent"
        assert ctx.active_kataka_id == "run-agent"


class TestSerialization:
    """*_to_dict / *_from_dict behaviour worth pinning down."""

    def test_flavor_omits_unset_optionals(self):
        data = flavor_to_dict(make_flavor("bug-fix"))
        assert "description" not in data
        assert "kataka" not in data
        assert flavor_from_dict(data) == make_flavor("bug-fix")

    def test_decision_timestamp_uses_z_suffix(self):
        decision = replace(
            make_decision(DecisionType.FLAVOR_SELECTION),
            decided_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        )
        data = decision_to_dict(decision)
        assert data["decided_at"] == "2024-05-01T12:00:00Z"
        assert "outcome" not in data
        assert decision_from_dict(data).decided_at == decision.decided_at

    def test_outcome_omits_unset_fields(self):
        outcome = DecisionOutcome(artifact_quality=ArtifactQuality.GOOD, gate_result=GateResult.PASSED)
        data = decision_outcome_to_dict(outcome)
        assert data == {"artifact_quality": "good", "gate_result": "passed"}
        assert decision_outcome_from_dict(data) == outcome

    def test_stage_rule_round_trip(self):
        rule = StageRule(
            id="r1",
            category="plan",
            name="spike",
            condition="unknown territory",
            effect=RuleEffect.REQUIRE,
            magnitude=1.0,
            confidence=0.9,
            created_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )
        assert stage_rule_from_dict(stage_rule_to_dict(rule)) == rule

    def test_suggestion_keeps_review_notes(self):
        suggestion = RuleSuggestion(
            id="s1",
            suggested_rule=RuleInput(
                category="build",
                name="bug-fix",
                condition="hotfix",
                effect=RuleEffect.BOOST,
                magnitude=0.1,
                confidence=0.5,
            ),
            trigger_decision_ids=["d1"],
            observation_count=1,
            reasoning="good output",
            rejection_reason="too broad",
        )
        data = rule_suggestion_to_dict(suggestion)
        assert data["rejection_reason"] == "too broad"
        assert "edit_delta" not in data
        assert rule_suggestion_from_dict(data).rejection_reason == "too broad"

    def test_context_from_dict_parses_hint(self):
        ctx = orchestrator_context_from_dict(
            {
                "bet": {"title": "x"},
                "flavor_hint": {"recommended": ["bug-fix"], "strategy": "restrict"},
            }
        )
        assert ctx.available_artifacts == []
        assert ctx.flavor_hint.strategy == FlavorHintStrategy.RESTRICT
        assert ctx.flavor_hint.recommended == ["bug-fix"]

    def test_stage_definition_defaults(self):
        stage = stage_definition_from_dict({"category": "build", "available_flavors": ["a"]})
        assert stage.pinned_flavors == []
        assert stage.orchestrator == OrchestratorConfig()
