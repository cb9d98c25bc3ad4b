"""Settings package for the retreat booking engine.

`base.py` contains configuration shared across environments. The `dev.py`,
`prod.py` and `test.py` modules extend it with environment specific
overrides.
"""
