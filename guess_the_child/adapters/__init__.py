"""
Adapters module for Guess The Child

Contains captioning service adapters:
- Gemini for pair captioning
"""
