""" Conversion between the tagged values used by the variable server and
    native Python values.

    On the wire a typed value is a dictionary with two fields: the 'type' tag,
    naming one of the :class:`VarType` members, and the 'value' itself::

        {'type': 'uint16', 'value': 15}
        {'type': 'str', 'value': 'hello'}
        {'type': 'float', 'value': 3.25}

    :func:`decode` turns such a dictionary into a Python value; :func:`encode`
    goes the other way, converting a Python value (or its text representation)
    according to the type declared for the target variable.
"""

import enum
import math

from .errors import TypeMismatch


class VarType(enum.Enum):
    """ The declared type of a variable. Integer types carry their inclusive
        bounds as :attr:`minimum` and :attr:`maximum`.
    """

    STR = 'str'
    UINT16 = 'uint16'
    UINT32 = 'uint32'
    INT16 = 'int16'
    INT32 = 'int32'
    INT64 = 'int64'
    UINT64 = 'uint64'
    FLOAT = 'float'

    @property
    def integer(self):
        return self in _bounds


    @property
    def minimum(self):
        return _bounds[self][0]


    @property
    def maximum(self):
        return _bounds[self][1]


# end of class VarType


_bounds = dict()
_bounds[VarType.UINT16] = (0, 0xFFFF)
_bounds[VarType.UINT32] = (0, 0xFFFFFFFF)
_bounds[VarType.UINT64] = (0, 0xFFFFFFFFFFFFFFFF)
_bounds[VarType.INT16] = (-0x8000, 0x7FFF)
_bounds[VarType.INT32] = (-0x80000000, 0x7FFFFFFF)
_bounds[VarType.INT64] = (-0x8000000000000000, 0x7FFFFFFFFFFFFFFF)



def to_type(tag):
    """ Return the :class:`VarType` for *tag*, which may already be a
        :class:`VarType`, or its string name. Returns None for anything
        unrecognized.
    """

    if isinstance(tag, VarType):
        return tag

    try:
        return VarType(tag)
    except ValueError:
        return None



def decode(raw):
    """ Return the Python value held in the tagged *raw* value: a str for
        string variables, an int for the integer types, a float for floating
        point. Anything unsupported or malformed decodes to None; it never
        decodes to a zero or an empty string, so that the caller can tell the
        absence of a value from a legitimate zero.
    """

    try:
        tag = raw['type']
        value = raw['value']
    except (KeyError, TypeError):
        return None

    type = to_type(tag)

    if type is None or value is None:
        return None

    if type == VarType.STR:
        if isinstance(value, str):
            return value
        return None

    if type == VarType.FLOAT:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    if isinstance(value, bool) or not isinstance(value, int):
        return None

    if value < type.minimum or value > type.maximum:
        return None

    return value



def encode(value, declared_type):
    """ Convert *value* to the tagged representation for a variable whose
        declared type is *declared_type*. The *value* may be a Python number,
        or text, which is parsed according to the declared type; the apparent
        type of a literal is never used to pick the conversion.
        :class:`TypeMismatch` is raised if the conversion is not possible.
    """

    type = to_type(declared_type)

    if type is None:
        raise TypeMismatch('unsupported variable type: ' + repr(declared_type))

    if value is None:
        raise TypeMismatch('a %s variable cannot be set to None' % (type.value))

    if type == VarType.STR:
        converted = str(value)
    elif type == VarType.FLOAT:
        converted = _to_float(value)
    else:
        converted = _to_integer(value, type)

    raw = dict()
    raw['type'] = type.value
    raw['value'] = converted
    return raw



def _to_float(value):

    if isinstance(value, bool):
        raise TypeMismatch('a float variable cannot be set to a boolean')

    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            raise TypeMismatch("%d is out of range for float" % (value))

    text = _text(value)

    try:
        return float(text)
    except ValueError:
        raise TypeMismatch("%s is not a valid float" % (repr(text)))



def _to_integer(value, type):

    if isinstance(value, bool):
        raise TypeMismatch('a %s variable cannot be set to a boolean' % (type.value))

    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            value = int(value)
        else:
            raise TypeMismatch("%s is not a valid %s" % (repr(value), type.value))

    if isinstance(value, int):
        converted = value
    else:
        text = _text(value)

        try:
            converted = int(text, 10)
        except ValueError:
            # Prefixed literals (0x1F, 0o17, 0b101).
            try:
                converted = int(text, 0)
            except ValueError:
                raise TypeMismatch("%s is not a valid %s" % (repr(text), type.value))

    if converted < type.minimum or converted > type.maximum:
        raise TypeMismatch("%d is out of range for %s (%d to %d)" % (converted, type.value, type.minimum, type.maximum))

    return converted



def _text(value):

    try:
        value = value.decode()
    except AttributeError:
        pass

    if isinstance(value, str):
        return value.strip()

    raise TypeMismatch('cannot interpret %s as a number' % (repr(value)))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
