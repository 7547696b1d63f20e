"""
Tourwatch - Flag pull requests that touch code covered by tours.

A GitHub Action helper that:
1. Loads tour documents (``*.tour``) from the repository
2. Lists the files changed by the current pull request
3. Finds tours whose steps point at changed files
4. Posts (or updates) a single summary comment on the pull request

Usage:
    tourwatch                         # Run inside a pull_request workflow
    tourwatch --tour-path docs/tours  # Scan a different tour directory
    tourwatch --silent                # Compute outputs without commenting
"""

__version__ = "0.1.0"
__author__ = "Tourwatch"
