from typing import TypedDict


class RuleRegistryEntry(TypedDict, total=False):
    display_name: str
    symbol: str
    category: str
    severity: str
    short_description: str
    manual_instructions: str
    fixable: bool
    fixer: str
