"""Submission Report package.

Fetches the members of a user group and their submissions for one
assignment from the assignment platform, joins them per student and
renders a static HTML report (optionally print-ready for saving as PDF).

Package Structure
-----------------
- ``pipeline/``: headless stages (context resolution, fetching, joining,
  rendering, run state).
- ``cli.py``: command-line entrypoint.
- ``config.py``: configuration constants, as UPPER_SNAKE_CASE.
- ``exceptions.py``: project-specific exception classes.

Examples
--------
>>> import submission_report
>>> # See ``submission_report.cli`` for the entrypoint.
"""

__version__ = "1.0.0"
