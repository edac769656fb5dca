from typing import List, Tuple

from core.hard_rules import HardRule, StaffingContext


class ConstraintManager:
    def __init__(self):
        self.rules: List[Tuple[str, HardRule]] = []

    def add_rule(self, code: str, rule: HardRule, condition: bool = True):
        """Register a rule with optional enablement condition."""
        if condition:
            self.rules.append((code, rule))

    def failed(self, ctx: StaffingContext) -> List[Tuple[str, str]]:
        """Evaluate all registered rules in order; return (code, message) of failures."""
        return [(code, rule.message) for code, rule in self.rules if not rule.check(ctx)]
