"""
Footballer API
==============

JSON REST service for footballer records:
- Listing with full-text search, position containment, sorting and paging
- CRUD with optimistic concurrency on updates
"""

__version__ = "1.0.0"
