"""
Example module taught by the guide.

The guide quotes this module verbatim (minus this docstring), so keep it short.
"""

from typing import Optional


def add_numbers(a, b):
    return a + b


def hello_world(name: Optional[str] = None) -> str:
    if not name:
        return "Hello, World!"
    return f"Hello, {name}!"
