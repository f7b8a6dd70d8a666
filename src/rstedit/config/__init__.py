"""Configuration loading and validation for rstedit.

Main components:
- ConfigLoader: Load and validate parser and rewrite configuration files
- flatten_pydantic_errors: Human-readable validation messages
- Environment variable overrides for parser settings
"""

from rstedit.config.loader import ConfigLoader
from rstedit.config.validator import flatten_pydantic_errors

__all__ = [
    "ConfigLoader",
    "flatten_pydantic_errors",
]
