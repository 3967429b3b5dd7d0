""" Exceptions raised by pyvars. Every failure reported by the variable
    store, or encountered while talking to it, surfaces as a subclass of
    :class:`VarsError`; the *status* attribute carries the errno value the
    store associated with the failure, so that a script can hand the same
    code on to someone else (for example, as a validation response).
"""

import errno
import os


class VarsError(Exception):
    """ Base class for all pyvars errors. The *text* is the human-readable
        reason; *status* defaults to the class-level :attr:`status`.
    """

    status = errno.EIO

    def __init__(self, text=None, status=None):

        if status is not None:
            self.status = int(status)

        if text is None or text == '':
            text = os.strerror(self.status)

        self.text = str(text)
        Exception.__init__(self, self.text)


    def to_error(self):
        """ Return the dictionary representation of this error, as used in
            the 'error' field of a reply payload.
        """

        error = dict()
        error['type'] = self.__class__.__name__
        error['text'] = self.text
        error['status'] = self.status
        return error


class NotFound(VarsError, LookupError):
    """ A name or handle does not resolve to a variable. """

    status = errno.ENOENT


class TypeMismatch(VarsError, ValueError):
    """ A value cannot be converted to the declared type of its variable. """

    status = errno.EINVAL


class TransactionExpired(VarsError):
    """ A validation or print-session id was already consumed, or was
        never known to the store.
    """

    status = errno.ESRCH


class PermissionDenied(VarsError):
    """ The store refused the operation. """

    status = errno.EPERM


class Rejected(VarsError):
    """ A validator refused a pending write; *status* is the validator's
        response code.
    """

    status = errno.EINVAL


class TransportError(VarsError):
    """ The connection to the store failed, or has been closed. """

    status = errno.EIO


class TransportTimeout(TransportError):
    """ The store did not acknowledge or answer a request in time. """

    status = errno.ETIMEDOUT


_by_name = dict()

for _class in (VarsError, NotFound, TypeMismatch, TransactionExpired,
               PermissionDenied, Rejected, TransportError, TransportTimeout):
    _by_name[_class.__name__] = _class

_by_status = dict()
_by_status[errno.ENOENT] = NotFound
_by_status[errno.EINVAL] = TypeMismatch
_by_status[errno.ESRCH] = TransactionExpired
_by_status[errno.EPERM] = PermissionDenied
_by_status[errno.EACCES] = PermissionDenied
_by_status[errno.EIO] = TransportError
_by_status[errno.ETIMEDOUT] = TransportTimeout


def from_error(error):
    """ Build the exception described by an *error* dictionary, as found in
        the payload of a failed reply. The 'type' field is honored if it names
        a known class; otherwise the 'status' field picks the class. Anything
        else becomes a bare :class:`VarsError`.
    """

    try:
        name = error['type']
    except (KeyError, TypeError):
        name = None

    try:
        status = error['status']
    except (KeyError, TypeError):
        status = None

    try:
        text = error['text']
    except (KeyError, TypeError):
        text = str(error)

    try:
        e_class = _by_name[name]
    except KeyError:
        e_class = _by_status.get(status, VarsError)

    return e_class(text, status)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
