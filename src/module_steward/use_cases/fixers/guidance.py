"""Structural violations that need an architectural decision: guidance instead of a mutation."""

from module_steward.domain.constants import (
    RULE_DUPLICATE_LAYER,
    RULE_LEAF_HAS_CHILDREN,
    RULE_MISSING_CHILD_DESCRIPTOR,
    RULE_PARENT_AGGREGATOR_NON_LEAF_CHILD,
    RULE_PURE_AGGREGATOR_LEAF_CHILD,
)
from module_steward.domain.entities import FixOutcome, Violation
from module_steward.use_cases.fixers.base import DescriptorFixer, FixerContext


class HierarchyGuidanceFixer(DescriptorFixer):
    """Never mutates; returns NotFixable with the registry's manual instructions."""

    name = "hierarchy-guidance"
    rule_ids = frozenset(
        {
            RULE_PURE_AGGREGATOR_LEAF_CHILD,
            RULE_PARENT_AGGREGATOR_NON_LEAF_CHILD,
            RULE_LEAF_HAS_CHILDREN,
            RULE_MISSING_CHILD_DESCRIPTOR,
            RULE_DUPLICATE_LAYER,
        }
    )
    priority = 100

    def can_fix(self, violation: Violation) -> bool:
        return violation.rule_id in self.rule_ids

    def fix(self, violation: Violation, context: FixerContext) -> FixOutcome:
        parts = [violation.message]
        if context.guidance is not None:
            instructions = context.guidance.get_manual_instructions(violation.rule_id)
            if instructions:
                parts.append(instructions)
        elif violation.fix_hint:
            parts.append(violation.fix_hint)
        return FixOutcome.not_fixable("\n".join(parts))
