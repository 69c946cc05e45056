"""
Helper utilities for Kawogo Care
Common functions used across modules
"""

import math
import yaml
from typing import Dict, Any


def load_yaml(file_path: str) -> Dict[str, Any]:
    """
    Load YAML configuration file

    Args:
        file_path: Path to YAML file

    Returns:
        Dictionary with configuration
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f)


def format_file_size(bytes_size: int) -> str:
    """
    Format bytes to human readable size

    Args:
        bytes_size: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB")
    """
    for unit in ['B', 'KB', 'MB', 'GB']:
        if bytes_size < 1024.0:
            return f"{bytes_size:.2f} {unit}"
        bytes_size /= 1024.0
    return f"{bytes_size:.2f} TB"


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves rounded up

    Python's round() rounds halves to even (round(86.5) == 86).

    Args:
        value: Number to round

    Returns:
        Rounded integer (e.g., 86.5 -> 87)
    """
    return math.floor(value + 0.5)
