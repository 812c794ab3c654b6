"""
Color utilities for calltrace

Provides ANSI color codes for status messages written to stderr.
"""

import os
import sys

# Status output goes to stderr, so that is the stream checked for a terminal
SUPPORTS_COLOR = (
    hasattr(sys.stderr, 'isatty') and sys.stderr.isatty() and
    os.environ.get('TERM') != 'dumb' and
    not os.environ.get('NO_COLOR')
)

class Colors:
    """ANSI color codes for terminal output."""

    BRIGHT_RED = '\033[91m'
    BRIGHT_YELLOW = '\033[93m'
    BRIGHT_MAGENTA = '\033[95m'
    BRIGHT_CYAN = '\033[96m'

    RESET = '\033[0m'

    @classmethod
    def disable(cls):
        """Disable all colors."""
        for attr in dir(cls):
            if not attr.startswith('_') and attr.isupper():
                setattr(cls, attr, '')


# Disable colors if not supported
if not SUPPORTS_COLOR:
    Colors.disable()


# Semantic color functions
def error(text: str) -> str:
    """Format error text."""
    return f"{Colors.BRIGHT_RED}{text}{Colors.RESET}"

def warning(text: str) -> str:
    """Format warning text."""
    return f"{Colors.BRIGHT_YELLOW}{text}{Colors.RESET}"

def info(text: str) -> str:
    """Format info text."""
    return f"{Colors.BRIGHT_CYAN}{text}{Colors.RESET}"

def address(text: str) -> str:
    """Format Ethereum address."""
    return f"{Colors.BRIGHT_MAGENTA}{text}{Colors.RESET}"

def number(text: str) -> str:
    """Format numbers."""
    return f"{Colors.BRIGHT_YELLOW}{text}{Colors.RESET}"

def function_name(name: str) -> str:
    """Format function name."""
    return f"{Colors.BRIGHT_MAGENTA}{name}{Colors.RESET}"
