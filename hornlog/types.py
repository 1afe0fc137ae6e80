"""
Type aliases for hornlog.

This module provides clear type aliases to improve code readability
throughout the codebase.
"""

from typing import Dict, List
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .terms import Term


# Bindings - map variable names to terms
Bindings = Dict[str, 'Term']

# A solution rendered for callers - query variable to textual value
RenderedBindings = Dict[str, str]

# Query result as handed back by the textual interface
QueryResult = List[RenderedBindings]
