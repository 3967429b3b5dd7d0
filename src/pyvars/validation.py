""" Validation transactions. When a script has registered VALIDATE interest
    in a variable, any other client's attempt to write that variable is held
    by the store and announced to the script as a VALIDATE event. The
    context of that event is a single-use transaction id: the script calls
    :func:`start` to see the proposed value, and :func:`end` to let the write
    through (status zero) or to refuse it (any other status, which the writer
    receives as the reason for the failure).

    The writer stays blocked until :func:`end` is called, so every started
    transaction must be ended. The :class:`Validation` context manager makes
    that automatic::

        kind, context = pyvars.wait()

        if kind == pyvars.VALIDATE:
            with pyvars.Validation(context) as pending:
                if pending.value >= 10:
                    pending.reject(errno.ERANGE)
"""

import errno
import logging

from . import errors
from . import store
from . import value


logger = logging.getLogger(__name__)

ACCEPT = 0


def start(transaction, connection=None):
    """ Fetch the pending write identified by *transaction*, the context of
        a VALIDATE event. Returns a (handle, candidate value) tuple. A
        transaction can only be started once: asking again, or asking about
        an id the store does not know, raises
        :class:`pyvars.errors.TransactionExpired`.
    """

    if connection is None:
        connection = store.default()

    transaction = int(transaction)
    handle, raw = connection.fetch_validation(transaction)
    candidate = value.decode(raw)

    logger.debug('validation %d: handle %d, candidate %r', transaction, handle, candidate)
    return (handle, candidate)



def end(transaction, status=ACCEPT, connection=None):
    """ Finish the validation identified by *transaction*. A *status* of
        zero accepts the write; anything else refuses it, and the writer's
        :func:`pyvars.set` raises :class:`pyvars.errors.Rejected` with that
        status.
    """

    if connection is None:
        connection = store.default()

    transaction = int(transaction)
    status = int(status)

    logger.debug('validation %d: status %d', transaction, status)
    connection.resolve_validation(transaction, status)



class Validation:
    """ Context manager for a single validation *transaction*. Entering the
        context starts the transaction, making the :attr:`handle` and the
        candidate :attr:`value` available; leaving it ends the transaction
        exactly once, with the status set by :func:`accept` or
        :func:`reject`. The write is accepted unless told otherwise.

        If the body of the ``with`` statement raises an exception the write
        is refused with ``errno.EINVAL``, and the exception propagates.
    """

    def __init__(self, transaction, connection=None):

        if connection is None:
            connection = store.default()

        self.transaction = int(transaction)
        self.connection = connection
        self.status = ACCEPT
        self.handle = None
        self.value = None
        self.ended = False


    def __enter__(self):

        try:
            self.handle, self.value = start(self.transaction, self.connection)
        except errors.TransactionExpired:
            # Nothing to end; the store no longer knows this transaction.
            self.ended = True
            raise
        except errors.VarsError:
            # The store may still be holding the writer. Refuse the write
            # before reporting the original failure.
            self.reject(errno.EINVAL)
            try:
                self.end()
            except errors.VarsError:
                logger.exception('validation %d: could not end after failed start', self.transaction)
            raise

        return self


    def __exit__(self, exception_type, exception, traceback):

        if exception_type is not None:
            self.reject(errno.EINVAL)

        self.end()


    def accept(self):
        """ Let the pending write through. """

        self.status = ACCEPT


    def reject(self, status=errno.EINVAL):
        """ Refuse the pending write, reporting *status* to the writer. """

        status = int(status)

        if status == ACCEPT:
            raise ValueError('a rejection requires a nonzero status')

        self.status = status


    def end(self):
        """ End the transaction with the current status. Only the first call
            has any effect.
        """

        if self.ended:
            return

        self.ended = True
        end(self.transaction, self.status, self.connection)


# end of class Validation


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
