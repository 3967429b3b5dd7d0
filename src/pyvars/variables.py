""" Reading, writing, and registering interest in variables. These are the
    calls a script makes before it settles into its :func:`pyvars.wait` loop,
    and the calls its event handlers make to deliver results back to the
    store.

    Variables are identified either by name (a path such as
    ``/sys/test/a``) or by the integer handle the store assigned to that
    name, as returned by :func:`find`.
"""

import logging

from . import errors
from . import events
from . import store
from . import value


logger = logging.getLogger(__name__)


def find(name, connection=None):
    """ Return the handle for the variable called *name*, or None if the
        store does not know that name. Handles are stable for as long as the
        variable exists, and are cheaper to use than names for repeated
        access.
    """

    if connection is None:
        connection = store.default()

    try:
        return connection.resolve(str(name))
    except errors.NotFound:
        return None



def get(target, connection=None):
    """ Return the current value of the variable identified by *target*, a
        name or a handle. None is returned if the variable does not exist, or
        if its value has a type this binding cannot represent; a variable that
        exists always yields a real value, including zero and the empty string.
    """

    if connection is None:
        connection = store.default()

    handle = to_handle(target, connection)

    if handle is None:
        return None

    try:
        raw = connection.read(handle)
    except errors.NotFound:
        return None

    return value.decode(raw)



def set(target, new_value, connection=None):
    """ Set the variable identified by *target*, a name or a handle, to
        *new_value*. The value may be text or a Python number; it is converted
        according to the type the store declares for that variable, and a
        :class:`pyvars.errors.TypeMismatch` is raised if that is not possible.

        This call blocks until the store has accepted the new value. If the
        variable is under validation by another client this includes the time
        taken by that client to decide; a refusal is raised as
        :class:`pyvars.errors.Rejected`, carrying the validator's status.
    """

    if connection is None:
        connection = store.default()

    handle = to_handle(target, connection)

    if handle is None:
        raise errors.NotFound('no such variable: ' + str(target))

    declared = connection.declared_type(handle)
    raw = value.encode(new_value, declared)

    logger.debug('set %s (%s) to %r', target, declared.value, raw['value'])
    connection.write(handle, raw)



def notify(handle, kind, connection=None):
    """ Register interest in events of *kind* (MODIFIED, CALC, VALIDATE or
        PRINT) for the variable at *handle*. Subsequent events are returned
        by :func:`pyvars.wait` on the same connection. Registrations are
        additive: several kinds can be registered for one handle, and a
        failed registration leaves the earlier ones in place.
    """

    if connection is None:
        connection = store.default()

    kind = events.to_kind(kind)

    if kind not in events.registrable:
        raise ValueError('cannot register interest in %s events' % (kind.name))

    connection.register(_integer(handle), kind)



def to_handle(target, connection):
    """ Return the handle for *target*, resolving it first if it is a name.
        Returns None for an unknown name.
    """

    if isinstance(target, str):
        return find(target, connection)

    return _integer(target)



def _integer(handle):

    if isinstance(handle, bool):
        raise TypeError('a variable handle must be an integer, not a boolean')

    try:
        return int(handle)
    except (TypeError, ValueError):
        raise TypeError('a variable handle must be an integer, not ' + repr(handle))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
