"""
User accounts: registration, authentication, two factor management and
profile settings.
"""
