##############################################################################

##############################################################################

import re
import sys
import datetime
import numpy as np
from typing import Union
from dateutil.relativedelta import relativedelta
from prettytable import PrettyTable

from .global_vars import gDaysInYear
from .error import LibError


###############################################################################

_TENOR_PATTERN = re.compile(r"^(\d+)([DWMY])$")

###############################################################################


def _func_name():
    """ Extract calling function name - using a protected method is not that
    advisable but calling inspect.stack is so slow it must be avoided. """
    ff = sys._getframe().f_back.f_code.co_name
    return ff

###############################################################################


def add_tenor(dt: datetime.date,
              tenor: str):
    """ Add a tenor string such as "1D", "2W", "3M" or "10Y" to a date. No
    business day adjustment is applied. """

    match = _TENOR_PATTERN.match(tenor.strip().upper())
    if match is None:
        raise LibError(f"Invalid tenor {tenor!r}")

    num = int(match.group(1))
    unit = match.group(2)

    if unit == "D":
        return dt + relativedelta(days=num)
    elif unit == "W":
        return dt + relativedelta(weeks=num)
    elif unit == "M":
        return dt + relativedelta(months=num)
    return dt + relativedelta(years=num)

###############################################################################


def tenor_to_months(tenor: str):
    """ Number of months in a monthly or yearly tenor. Used to step the
    periods of a swap leg. """

    match = _TENOR_PATTERN.match(tenor.strip().upper())
    if match is None or match.group(2) not in ("M", "Y"):
        raise LibError(f"Tenor {tenor!r} is not a whole number of months")

    num = int(match.group(1))
    return num if match.group(2) == "M" else 12 * num

###############################################################################


def year_frac(start_dt: datetime.date,
              end_dt: datetime.date):
    """ ACT/365F year fraction between two dates. Negative if end is before
    start. """

    return (end_dt - start_dt).days / gDaysInYear

###############################################################################


def format_table(header: Union[list, tuple],
                 rows: Union[list, tuple]):
    """ Format a 2D array into a table-like string using PrettyTable. """

    t = PrettyTable(header)
    num_cols = len(header)

    for row in rows:
        if len(row) != num_cols:
            raise ValueError("Header and Row Size must match!")
        t.add_row(row)

    return t.get_string()

###############################################################################


def to_usable_type(t):
    """ Convert a type such that it can be used with `isinstance` """
    if hasattr(t, '__origin__'):
        origin = t.__origin__
        # t comes from the `typing` module
        if origin is list:
            return (list, tuple, np.ndarray)
        elif origin is Union:
            return tuple(to_usable_type(tp) for tp in t.__args__)
        return origin

    if t is list:
        return (list, tuple, np.ndarray)
    if t is float:
        return (int, float, np.floating)
    if t is int:
        return (int, np.integer)
    if isinstance(t, tuple):
        return tuple(to_usable_type(tp) for tp in t)

    return t

###############################################################################


def check_argument_types(func, values):
    """ Check that all values passed into a function are of the same type
    as the function annotations. If a value has not been annotated, it
    will not be checked. """

    for value_name, annotation_type in func.__annotations__.items():

        if value_name == "return" or value_name not in values:
            continue

        value = values[value_name]
        usable_type = to_usable_type(annotation_type)

        if not isinstance(value, usable_type):
            raise LibError(f"Argument Type Error in {func.__qualname__}: "
                           f"{value_name}={value!r} of type {type(value)} "
                           f"is not one of {usable_type}")

###############################################################################
