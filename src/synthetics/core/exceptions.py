class SyntheticsError(Exception):
    """Base exception for Synthetics"""
    pass


class ConfigurationError(SyntheticsError):
    """Configuration-related errors"""
    pass


class LoaderError(SyntheticsError):
    """Error loading journey suites or required modules"""
    pass


class SessionError(SyntheticsError):
    """Browser session could not be acquired"""
    pass
