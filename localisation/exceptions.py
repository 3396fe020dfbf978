class UnsupportedLocaleError(ValueError):
    """Raised when activating a locale that is not configured."""

    def __init__(self, locale):
        self.locale = locale
        super().__init__(f"Locale [{locale}] is not supported.")
