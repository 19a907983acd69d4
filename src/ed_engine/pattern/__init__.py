"""Search patterns, global selection, and substitution."""

from .engine import PRINT_FLAGS, PatternEngine, SubstitutionSpec
from .template import Template, parse_template

__all__ = [
    "PRINT_FLAGS",
    "PatternEngine",
    "SubstitutionSpec",
    "Template",
    "parse_template",
]
