"""
Remote collaborators
"""
