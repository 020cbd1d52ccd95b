"""
match.py - Match phase: resolve candidate flavors and score them.

Scoring is deterministic for a given context, rule set and strategy, so
this phase records no decision. It produces one MatchReport per scored
(non-pinned) candidate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from stageswarm.runtime.errors import FlavorNotFoundError, OrchestratorError
from stageswarm.runtime.ports import FlavorRegistry
from stageswarm.runtime.types import (
    Flavor,
    FlavorHintStrategy,
    MatchReport,
    OrchestratorContext,
    StageDefinition,
    StageRule,
)

from .journal import RunJournal
from .rule_evaluator import RuleEffects, classify_rules
from .scoring import HINT_BOOST, ScoringStrategy, clamp01, count_keyword_hits, learning_boost

PHASE = "match"


@dataclass
class MatchPhaseResult:
    """Output of the match phase.

    Attributes:
        candidates: Resolved, scorable flavors (pinned flavors excluded).
        pinned_flavors: Resolved pinned flavors, stage pins first then rule-required.
        match_reports: One report per candidate, in candidate order.
        excluded: Every excluded name, from stage config and rules.
        pinned: Every pinned name that survived exclusion.
        rule_effects: Classified effects of the rules that fired.
    """

    candidates: List[Flavor]
    pinned_flavors: List[Flavor]
    match_reports: List[MatchReport]
    excluded: Set[str]
    pinned: List[str]
    rule_effects: RuleEffects = field(default_factory=RuleEffects)

    def report_for(self, name: str) -> Optional[MatchReport]:
        for report in self.match_reports:
            if report.flavor_name == name:
                return report
        return None


def _resolve(
    registry: FlavorRegistry,
    stage_category: str,
    name: str,
    label: str,
    journal: RunJournal,
) -> Optional[Flavor]:
    """Look a flavor up, dropping it with a warning when the registry has no such name."""
    try:
        return registry.get(stage_category, name)
    except FlavorNotFoundError as exc:
        journal.warning(
            'Orchestrator: %s "%s/%s" not found in registry, skipping (%s).',
            label,
            stage_category,
            name,
            exc,
        )
        return None
    except Exception as exc:
        raise OrchestratorError(
            f'Stage "{stage_category}" failed to resolve {label} "{name}": {exc}',
            phase=PHASE,
            stage_category=stage_category,
        ) from exc


def match_flavors(
    stage: StageDefinition,
    context: OrchestratorContext,
    rules: Sequence[StageRule],
    flavor_registry: FlavorRegistry,
    strategy: ScoringStrategy,
    stage_category: str,
    journal: RunJournal,
) -> MatchPhaseResult:
    """Resolve, filter and score the stage's flavors.

    Raises:
        OrchestratorError: When nothing resolvable remains, when a flavor
            hint restricts candidates to nothing, or when the registry fails
            with anything other than FlavorNotFoundError.
    """
    excluded: Set[str] = set(stage.excluded_flavors)
    pinned: List[str] = list(dict.fromkeys(stage.pinned_flavors))

    for name in pinned:
        if name in excluded:
            journal.warning(
                'Orchestrator: flavor "%s/%s" is both pinned and excluded; exclusion wins.',
                stage_category,
                name,
            )

    effects = classify_rules(rules, context, stage_category)
    for name in sorted(effects.excluded - excluded):
        journal.info('Orchestrator: rule excludes flavor "%s/%s".', stage_category, name)
    excluded |= effects.excluded

    for name in sorted(effects.required):
        if name in excluded:
            journal.warning(
                'Orchestrator: flavor "%s/%s" is required by a rule but excluded; exclusion wins.',
                stage_category,
                name,
            )
        elif name not in pinned:
            pinned.append(name)

    pinned = [name for name in pinned if name not in excluded]
    candidate_names = [name for name in stage.available_flavors if name not in excluded]

    pinned_flavors: List[Flavor] = []
    for name in pinned:
        flavor = _resolve(flavor_registry, stage_category, name, "pinned flavor", journal)
        if flavor is not None:
            pinned_flavors.append(flavor)

    if not candidate_names and not pinned_flavors:
        raise OrchestratorError(
            f'Stage "{stage_category}" has no available flavors after applying exclusions.',
            phase=PHASE,
            stage_category=stage_category,
        )

    pinned_names = {f.name for f in pinned_flavors}
    candidates: List[Flavor] = []
    for name in dict.fromkeys(candidate_names):
        if name in pinned_names:
            continue
        flavor = _resolve(flavor_registry, stage_category, name, "flavor", journal)
        if flavor is not None:
            candidates.append(flavor)

    if not candidates and not pinned_flavors:
        journal.error(
            'Orchestrator: stage "%s" has no resolvable flavors (%s).',
            stage_category,
            ", ".join(candidate_names),
        )
        raise OrchestratorError(
            f'Stage "{stage_category}" has no resolvable flavors. '
            f"Ensure every flavor in available_flavors is registered.",
            phase=PHASE,
            stage_category=stage_category,
        )

    preferred: Set[str] = set()
    hint = context.flavor_hint
    if hint is not None:
        recommended = set(hint.recommended)
        if hint.strategy == FlavorHintStrategy.RESTRICT:
            candidates = [f for f in candidates if f.name in recommended]
            if not candidates and not pinned_flavors:
                raise OrchestratorError(
                    f'Stage "{stage_category}" flavor hint restricts candidates to '
                    f"[{', '.join(hint.recommended)}], none of which are resolvable.",
                    phase=PHASE,
                    stage_category=stage_category,
                )
        else:
            preferred = recommended

    reports = [
        _score_candidate(flavor, context, strategy, effects, preferred) for flavor in candidates
    ]

    return MatchPhaseResult(
        candidates=candidates,
        pinned_flavors=pinned_flavors,
        match_reports=reports,
        excluded=excluded,
        pinned=pinned,
        rule_effects=effects,
    )


def _score_candidate(
    flavor: Flavor,
    context: OrchestratorContext,
    strategy: ScoringStrategy,
    effects: RuleEffects,
    preferred: Set[str],
) -> MatchReport:
    base = strategy.score(flavor, context)
    hits = count_keyword_hits(flavor, context, strategy.keywords)
    l_boost = learning_boost(flavor, context)
    rule_adj = effects.adjustment_for(flavor.name)
    h_boost = HINT_BOOST if flavor.name in preferred else 0.0
    score = clamp01(base + l_boost + rule_adj + h_boost)

    reasoning = (
        f"Score {score:.2f}: {hits} keyword hit(s), "
        f"learning boost {l_boost:.2f}, rule adj {rule_adj:.2f}, hint boost {h_boost:.2f}."
    )
    fired: Dict[str, List[str]] = effects.fired
    if flavor.name in fired:
        reasoning += f' Rule fired for "{flavor.name}" ({len(fired[flavor.name])} rule(s)).'

    return MatchReport(
        flavor_name=flavor.name,
        score=score,
        keyword_hits=hits,
        rule_adjustments=rule_adj,
        learning_boost=l_boost,
        hint_boost=h_boost,
        reasoning=reasoning,
    )
