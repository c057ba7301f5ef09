"""
Core utilities for Guess The Child

Contains core functionality:
- Photo decoding and previews
- Roster editing and entry ids
- Caption pipeline
- Slideshow presenter and session controller
"""
