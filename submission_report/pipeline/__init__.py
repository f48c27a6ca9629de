"""Headless pipeline stages: context resolution, fetching and reporting.

Subpackages
-----------
- ``fetcher/``: platform HTTP boundary, paginated and chunked retrieval.
- ``report/``: per-student join, HTML rendering and run state.

``models.py`` holds the records shared by both, ``context.py`` the serial
resolvers consulted before a run.
"""
