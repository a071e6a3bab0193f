"""
regraft - transplant a segment of commit history onto a live branch.
"""

__version__ = "0.1.0"
__logo__ = "🌿"
