class TwoFactorSetupError(Exception):
    """Two factor credentials could not be generated."""
    pass
