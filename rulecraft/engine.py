"""Sequential rules engine: fires a rule set against a set of facts."""

import logging
from typing import Optional

from rulecraft.config import RulesEngineParameters, get_settings
from rulecraft.models.facts import Facts
from rulecraft.rules.models import Rule, Rules

logger = logging.getLogger(__name__)


class DefaultRulesEngine:
    """Fires rules one after the other in priority order.

    For each rule the condition is evaluated and, if it holds, the actions are
    executed. A rule whose condition raises is treated as not triggered; a rule
    whose actions raise is treated as failed. Both are logged and, unless the
    parameters say otherwise, the remaining rules are still fired.
    """

    def __init__(self, parameters: Optional[RulesEngineParameters] = None):
        self.parameters = parameters or get_settings().engine

    def _evaluate(self, rule: Rule, facts: Facts) -> bool:
        try:
            return rule.evaluate(facts)
        except Exception as e:
            logger.error("Rule '%s' evaluated with error: %s", rule.name, e)
            return False

    def _execute(self, rule: Rule, facts: Facts) -> bool:
        try:
            rule.execute(facts)
        except Exception as e:
            logger.error("Rule '%s' performed with error: %s", rule.name, e)
            return False
        logger.debug("Rule '%s' performed successfully", rule.name)
        return True

    def fire(self, rules: Rules, facts: Facts) -> list[Rule]:
        """Fire the rules against the facts.

        Returns:
            Rules whose actions were executed successfully, in firing order
        """
        params = self.parameters
        applied: list[Rule] = []
        if rules.is_empty():
            logger.warning("No rules registered! Nothing to apply")
            return applied

        logger.debug("Firing %d rule(s) against %d fact(s)", len(rules), len(facts))
        for rule in rules:
            if rule.priority > params.priority_threshold:
                logger.debug(
                    "Rule priority threshold (%d) exceeded at rule '%s' with priority=%d, "
                    "next rules will be skipped",
                    params.priority_threshold,
                    rule.name,
                    rule.priority,
                )
                break

            if not self._evaluate(rule, facts):
                logger.debug("Rule '%s' has been evaluated to false, it has not been executed", rule.name)
                if params.skip_on_first_non_triggered_rule:
                    logger.debug("Next rules will be skipped since skip_on_first_non_triggered_rule is set")
                    break
                continue

            logger.debug("Rule '%s' triggered", rule.name)
            if self._execute(rule, facts):
                applied.append(rule)
                if params.skip_on_first_applied_rule:
                    logger.debug("Next rules will be skipped since skip_on_first_applied_rule is set")
                    break
            elif params.skip_on_first_failed_rule:
                logger.debug("Next rules will be skipped since skip_on_first_failed_rule is set")
                break

        return applied

    def check(self, rules: Rules, facts: Facts) -> dict[Rule, bool]:
        """Evaluate the rules without executing them."""
        results: dict[Rule, bool] = {}
        for rule in rules:
            if rule.priority > self.parameters.priority_threshold:
                break
            results[rule] = self._evaluate(rule, facts)
        return results
