"""Exceptions raised by beanreminder."""


class ConfigurationError(ValueError):
    """Invalid reminder or recurrence rule data.

    Raised when a rule is constructed or validated, never while iterating.
    """
