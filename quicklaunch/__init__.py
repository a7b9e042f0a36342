"""
Tools to find and launch applications and other entries.

Some features:

- Discover desktop applications and entries of custom modes in the background
- Rank entries by fuzzy matching against a query
- Learn which applications are launched most and rank them higher
- Launch the selected entry
"""
__author__ = 'Sebastian Linke'
__license__ = 'MIT'
__version__ = '0.1-dev'

from . import core, entries, feeds, icongetter, matching, session, settings, storage
