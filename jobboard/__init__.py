"""Data-access layer for the government job board.

Announcements (jobs, results, admit cards, answer keys, admissions and
syllabi) live in one MongoDB collection; see jobboard.common.repositories.
"""

__version__ = "0.1.0"
