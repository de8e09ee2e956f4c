"""Attack surface reduction rule checks."""
from __future__ import annotations

from ..core.baseline import ASR_RULES
from ..core.comparison import evaluate_asr_rules
from .base import CategoryChecker
from .types import Method


class AttackSurfaceReductionRulesCheck(CategoryChecker):
    """Evaluate every rule of the embedded ASR table against Defender preferences."""

    category = "AttackSurfaceReductionRules"
    description = "Checks that each attack surface reduction rule is set to an accepted action."

    def evaluate(self) -> None:
        preferences = self.require(self.snapshot.defender_preferences, "defender_preferences")

        for evaluation in evaluate_asr_rules(
            ASR_RULES,
            preferences.attack_surface_reduction_rules_ids,
            preferences.attack_surface_reduction_rules_actions,
        ):
            self.add(
                evaluation.rule.friendly_name,
                evaluation.rule_id,
                evaluation.compliant,
                evaluation.action,
                Method.CIM,
            )
