"""
Blog API - posts and comments behind JWT authentication.
"""

__version__ = "0.1.0"
