"""
Domain Errors

Exception hierarchy shared by every layer of the detector.
Only ValidationError and AnalysisError ever reach the caller of analyze_text.
"""


class DetectorError(Exception):
    """Base class for detector errors"""
    pass


class ValidationError(DetectorError):
    """Input text or request parameters are outside the accepted bounds"""
    pass


class ProviderError(DetectorError):
    """The LLM provider call failed (timeout, network, non-2xx, bad payload)"""
    pass


class LLMResponseParseError(ProviderError):
    """The model answered, but not with a usable JSON verdict"""
    pass


class BudgetExceededError(DetectorError):
    """A cost or request budget refused the LLM path"""
    pass


class ConfigurationError(DetectorError):
    """Invalid configuration detected at load time"""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid detector configuration: " + "; ".join(self.errors))


class CacheError(DetectorError):
    """The cache backing store failed"""
    pass


class AnalysisError(DetectorError):
    """The statistical fallback itself failed"""
    pass
