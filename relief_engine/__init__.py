"""
Incident correlation and resource matching engine for disaster response.
"""

__version__ = "0.1.0"
