"""
Two factor authentication support (TOTP + recovery codes).
"""
