"""
Shared configuration and exceptions.
"""
