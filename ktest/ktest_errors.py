class KAssertionError(BaseException):
    """
    Raised when an assertion inside a test body fails. The diagnostic has already been
    printed at the failure site, so it carries no payload.

    Derives from BaseException so an `except Exception` in the code under test can not
    swallow it.
    """

    pass


class ConfigurationError(Exception):
    """
    Error representing something wrong with the harness configuration
    """

    pass


class RegistrationError(Exception):
    """
    Error representing a test that could not be added to a registry
    """

    pass
