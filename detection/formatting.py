"""
Display formatting helpers shared by the generators, the API and the CLI.
"""

from datetime import date

FILE_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_percent(value: int) -> str:
    """Render a whole-number percentage the way the results stat card shows it."""
    return f"{value:.1f}%"


def format_file_size(size_bytes: int) -> str:
    """
    Human readable file size, base 1024.

    Two decimals at most, trailing zeros dropped: 1536 -> "1.5 KB",
    2097152 -> "2 MB". Anything past gigabytes stays in GB.
    """
    if size_bytes <= 0:
        return "0 Bytes"

    unit = 0
    while unit < len(FILE_SIZE_UNITS) - 1 and size_bytes >= 1024 ** (unit + 1):
        unit += 1

    scaled = f"{size_bytes / 1024 ** unit:.2f}".rstrip("0").rstrip(".")
    return f"{scaled} {FILE_SIZE_UNITS[unit]}"


def format_last_seen(day: date) -> str:
    # M/D/YYYY, no zero padding
    return f"{day.month}/{day.day}/{day.year}"


def format_ip_address(third_octet: int, fourth_octet: int) -> str:
    return f"192.168.{third_octet}.{fourth_octet}"
