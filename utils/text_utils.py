"""
Text Utilities
Random identifiers and human-readable time strings
"""
import random
import string
from datetime import datetime


def get_random_string(length: int) -> str:
    """
    Generate random string

    Args:
        length: Length of string to generate

    Returns:
        Random alphabetic string
    """
    letters = string.ascii_letters  # a-z, A-Z
    return ''.join(random.choice(letters) for _ in range(length))


def format_elapsed(seconds: int) -> str:
    """
    Format a cooking timer

    Args:
        seconds: elapsed seconds

    Returns:
        "M:SS", or "H:MM:SS" once an hour has passed
    """
    seconds = max(int(seconds), 0)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def time_ago(then: datetime, now: datetime) -> str:
    """
    Relative age of a review or comment

    Args:
        then: creation time
        now: reference time

    Returns:
        Short relative string such as "5 min ago"
    """
    minutes = int((now - then).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} min ago"

    hours = minutes // 60
    if hours < 24:
        return f"{hours} hours ago"

    days = hours // 24
    if days < 7:
        return f"{days} days ago"

    return f"{days // 7} weeks ago"
