"""
PropertyHub: real-estate listings and lead-capture API.
"""

__version__ = "1.0.0"
