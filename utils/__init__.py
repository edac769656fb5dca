"""
utils package
-------------

Shared helpers for the planning service: configuration constants, date
parsing, record normalisation, input validation, result envelopes, seed
loading and logging setup.
"""
