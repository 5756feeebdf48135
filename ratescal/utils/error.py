"""
Exception classes for errors raised by the ratescal library.

All library errors derive from LibError so that callers can separate
calibration failures from other Python exceptions. The subclasses name the
four ways a calibration run can be aborted.

Example:
    >>> from ratescal.utils.error import LibError, NonConvergenceError
    >>>
    >>> try:
    ...     provider = calibrator.calibrate(groups, known, market_data, ref_data)
    ... except NonConvergenceError as e:
    ...     print(f"Calibration failed: {e._message}")
"""


class LibError(Exception):
    """ Class to understand if the error is coming from this library """

    def __init__(self,
                 message: str):
        """ Create error object """
        super().__init__(message)
        self._message = message

    def _print(self):
        print(type(self).__name__ + ":", self._message)


class ConfigurationError(LibError):
    """ Curve group or calibration set up is inconsistent, for example a
    curve calibrated in two groups or a non-square group. """


class MarketDataMissingError(LibError):
    """ A quote, FX rate or fixing needed to resolve a trade is absent. """


class NonConvergenceError(LibError):
    """ The root finder ran out of steps before meeting its tolerances. """


class NumericalError(LibError):
    """ A matrix that must be inverted is singular or too ill-conditioned. """
