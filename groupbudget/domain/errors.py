"""
Domain errors shared by the budget engine
"""


class BudgetValidationError(ValueError):
    """Structural misuse of the engine: bad month, category, measure or field."""
    pass


class ScenarioNotFoundError(LookupError):
    pass
