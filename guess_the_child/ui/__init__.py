"""
UI module for Guess The Child

Contains the Gradio-based web interface:
- Photo upload and roster editing
- Caption generation with streamed progress
- Reveal-style slideshow
"""
