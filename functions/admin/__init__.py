"""
Client-side core of the portfolio admin: backend variants, uploads and the
draft edit model.
"""
