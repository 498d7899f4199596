"""Constants used throughout gitrecipes."""

from pathlib import Path

# Directory holding one workspace per recipe
DEFAULT_REPOS_ROOT = Path("repos")

# Fixed commit content: every commit reuses this one-entry tree
DEFAULT_ENTRY = "data.txt"
DEFAULT_DATA = b"text"
FILE_MODE_BLOB = 0o100644

# Fixed author/committer identity
DEFAULT_AUTHOR_NAME = "gitrecipes"
DEFAULT_AUTHOR_EMAIL = "gitrecipes@example.com"

# Branch reference namespace
BRANCH_REF_PREFIX = "refs/heads/"

# Recipe file keys
RECIPES_KEY = "recipes"

# Exit codes
EXIT_USER_ERROR = 1
