"""gitrecipes - Deterministic git repository fixtures.

gitrecipes builds git repositories with precisely specified commit-graph
topologies from declarative recipes, for use as fixtures in downstream tests.
"""

__version__ = "0.1.0"
__author__ = "gitrecipes Contributors"

__all__ = ["__version__", "__author__"]
