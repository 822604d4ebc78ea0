"""
Shared Utilities Module
Common unit-conversion and formatting helpers.
"""

KB_PER_GB = 1024 * 1024


def format_size(size_bytes: int) -> str:
    """Format bytes to human readable string."""
    if size_bytes >= 1024 ** 3:
        return f"{size_bytes / (1024**3):.2f} GB"
    elif size_bytes >= 1024 ** 2:
        return f"{size_bytes / (1024**2):.2f} MB"
    elif size_bytes >= 1024:
        return f"{size_bytes / 1024:.2f} KB"
    return f"{size_bytes} B"


def kb_to_gb(size_kb: int) -> float:
    """Convert kibibytes to gibibytes."""
    return size_kb / KB_PER_GB


def format_uptime(seconds: float) -> str:
    """Format a duration in seconds as whole hours and minutes."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    return f"{hours}h {minutes}m"
