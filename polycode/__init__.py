"""
Polycode - translate source code between programming languages.
"""

__version__ = "0.1.0"
