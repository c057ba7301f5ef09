"""
Guess The Child

Upload childhood and current photos, let Gemini write a witty caption for
each pair, then present them as a reveal-style slideshow.
"""

__version__ = "0.1.0"
