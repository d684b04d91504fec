"""
Helpers: external processes, subtitle synthesis, ffmpeg arguments
"""
