"""
Gateway package for the portfolio content API.

Serves the galleries and site documents, the media upload sink and the
mobile shader asset from a data directory on disk, gating every write behind
a single shared admin token.
"""
