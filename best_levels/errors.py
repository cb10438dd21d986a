"""
Exceptions raised by the best_levels package.

Everything derives from BestLevelsError so callers can catch the whole family.
Only NoQualifyingLevels is non-fatal: get_best_levels converts it into an empty
selection and logs a warning.
"""


class BestLevelsError(Exception):
    """Base class for all best_levels errors."""


class MissingOutcomeColumn(BestLevelsError, KeyError):
    """The outcome column needed for scoring is absent or entirely missing."""

    def __init__(self, outcome: str):
        self.outcome = outcome
        super().__init__(f"Outcome column '{outcome}' is missing or has no values")

    def __str__(self) -> str:
        return self.args[0]


class InvalidParameter(BestLevelsError, ValueError):
    """n_levels or min_obs is not a non-negative number."""


class NoQualifyingLevels(BestLevelsError):
    """No level is present in at least min_obs observations."""

    def __init__(self, min_obs):
        self.min_obs = min_obs
        super().__init__(f"No levels present in at least {min_obs} observations")


class InvalidLevelsArgument(BestLevelsError, TypeError):
    """The levels argument is of a type that cannot carry a level set."""

    def __init__(self, received):
        self.received = type(received)
        super().__init__(
            f"You passed a {self.received.__name__} to levels. It should be an "
            "AugmentedFrame returned from add_best_levels, a model trained on "
            "such a frame, the registry mapping from such a frame, or a list "
            "of levels to use."
        )


class MissingLevelSetKey(BestLevelsError, KeyError):
    """A registry does not hold the '<group>_levels' entry being replayed."""

    def __init__(self, key: str, available=None):
        self.key = key
        msg = f"Looked for '{key}' in the level-set registry but it was not there"
        if available:
            msg += f" (found: {', '.join(available)})"
        super().__init__(msg)

    def __str__(self) -> str:
        return self.args[0]
