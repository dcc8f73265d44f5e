"""
Quiz Session Service

Timed quiz sessions with integrity monitoring:
- Countdown timer with auto-submit
- Clipboard, context-menu and tab-visibility monitoring
- Exact-match scoring and performance reporting
"""

__version__ = "1.0.0"
