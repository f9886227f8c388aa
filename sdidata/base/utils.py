# Licensed under the GPLv3 - see LICENSE
from functools import lru_cache
from operator import index

import numpy as np
from astropy.utils import classproperty


__all__ = ['InvalidRadix', 'InvalidDigit', 'fixedvalue',
           'RadixConverter', 'convert_base', 'get_converter']


class InvalidRadix(ValueError):
    """Radix (base) of a numeral system that is smaller than 2."""
    pass


class InvalidDigit(ValueError):
    """Digit that does not lie in the range allowed by its radix."""
    pass


class fixedvalue(classproperty):
    """Property that is fixed for all instances of a class.

    Based on `astropy.utils.decorators.classproperty`, but with
    a setter that passes if the value is identical to the fixed
    value, and otherwise raises a `ValueError`.
    """
    def __set__(self, instance, value):
        fixed_value = self.__get__(instance, type(instance))
        if value != fixed_value:
            raise ValueError('fixed property can only be set to {}.'
                             .format(fixed_value))


class RadixConverter:
    """Re-express a sequence of digits in a different radix.

    Once initialised, the instance can be used as a function that takes
    the digits of a non-negative integer in ``from_base`` and returns the
    digits of that same integer in ``to_base``.  Digits are ordered most
    significant first, both on input and on output.

    The conversion accumulates the input in an arbitrary-precision integer,
    so the number of input digits is not limited by any native integer size.
    The output is the minimal representation, i.e., it has no leading zeros,
    and zero is represented by an empty sequence.  Callers that need a fixed
    width should pad themselves.

    Instances hold no mutable state and can be shared freely; use
    `~sdidata.base.utils.get_converter` to get a shared instance.

    Parameters
    ----------
    from_base : int
        Radix of the input digits.  Should be at least 2.
    to_base : int
        Radix of the output digits.  Should be at least 2.

    Raises
    ------
    InvalidRadix
        If either radix is smaller than 2.
    """

    def __init__(self, from_base, to_base):
        from_base = index(from_base)
        to_base = index(to_base)
        for base in from_base, to_base:
            if base < 2:
                raise InvalidRadix("radix should be at least 2, got {0}."
                                   .format(base))
        self._from_base = from_base
        self._to_base = to_base

    @property
    def from_base(self):
        """Radix of the input digits."""
        return self._from_base

    @property
    def to_base(self):
        """Radix of the output digits."""
        return self._to_base

    @property
    def dtype(self):
        """Smallest dtype that can hold any output digit."""
        return np.min_scalar_type(self._to_base - 1)

    def __call__(self, digits):
        """Convert digits.

        Parameters
        ----------
        digits : iterable of int, bytes, or `~numpy.ndarray`
            Digits in ``from_base``, most significant first.

        Returns
        -------
        converted : `~numpy.ndarray`
            Digits in ``to_base``, most significant first, without leading
            zeros.

        Raises
        ------
        InvalidDigit
            If any of the input digits is negative or not smaller than
            ``from_base``.
        """
        return self.fromint(self.toint(digits))

    def toint(self, digits):
        """Interpret digits in ``from_base`` as a (Python) integer."""
        value = 0
        for digit in digits:
            digit = index(digit)
            if not 0 <= digit < self._from_base:
                raise InvalidDigit("digit {0} is not valid for radix {1}."
                                   .format(digit, self._from_base))
            value = value * self._from_base + digit

        return value

    def fromint(self, value):
        """Express a non-negative integer as digits in ``to_base``."""
        value = index(value)
        if value < 0:
            raise ValueError("can only convert non-negative integers.")

        out = []
        while value:
            value, digit = divmod(value, self._to_base)
            out.append(digit)

        return np.array(out[::-1], dtype=self.dtype)

    def inverse(self):
        """Converter that undoes this conversion."""
        return get_converter(self._to_base, self._from_base)

    def __eq__(self, other):
        return (type(self) is type(other)
                and self._from_base == other._from_base
                and self._to_base == other._to_base)

    def __hash__(self):
        return hash((type(self), self._from_base, self._to_base))

    def __repr__(self):
        return "{0}(from_base={1}, to_base={2})".format(
            self.__class__.__name__, self._from_base, self._to_base)


@lru_cache(maxsize=None)
def get_converter(from_base, to_base):
    """Get a shared `RadixConverter` for the given radix pair."""
    return RadixConverter(from_base, to_base)


def convert_base(digits, from_base, to_base):
    """Convert digits in ``from_base`` to digits in ``to_base``.

    Digits are ordered most significant first, and the result has no
    leading zeros.  See `RadixConverter` for details.
    """
    return get_converter(from_base, to_base)(digits)
