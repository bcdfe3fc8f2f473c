"""CanWeGame — find out when your friends are free to play.

Users register, publish recurring gaming-availability windows, and add
friends to see each other's schedules.
"""

__version__ = "0.1.0"
