"""
Tutor Chat v1.0

Conversational session controller for a tutoring chat client.
"""

__version__ = "1.0.0"
