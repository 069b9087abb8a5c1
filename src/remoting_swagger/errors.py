"""Errors raised while generating a document."""


class SpecGenerationError(ValueError):
    """The descriptors are individually valid but inconsistent with each other."""
