"""
Mojang API proxy service.
"""
