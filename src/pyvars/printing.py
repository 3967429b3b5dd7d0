""" Print sessions. A script that registered PRINT interest in a variable is
    responsible for rendering that variable as text whenever some other
    client asks for it (see :func:`render`). The request arrives as a PRINT
    event whose context is a single-use session id; the script opens the
    session, writes whatever text it likes, and closes it, at which point
    the text is handed to the client that asked::

        kind, context = pyvars.wait()

        if kind == pyvars.PRINT:
            handle, session = pyvars.open_print_session(context)
            with session:
                session.write('Hello from Python!\\n')

    The reader stays blocked until the session is closed, so every opened
    session must be closed, even if writing to it failed.
"""

import io
import logging

from . import errors
from . import store
from . import variables


logger = logging.getLogger(__name__)


class PrintSession:
    """ The writable end of a print session. Text passed to :func:`write` is
        buffered locally, and sent to the store whenever :attr:`limit`
        characters accumulate, when :func:`flush` is called, and when the
        session is closed. The session can be used as a context manager, in
        which case it is closed on the way out of the ``with`` block.

        :ivar id: The session identifier, from the PRINT event.
        :ivar handle: The handle of the variable being rendered.
    """

    limit = 8192

    def __init__(self, id, handle, connection):

        self.id = id
        self.handle = handle
        self.connection = connection
        self.closed = False

        self._buffer = io.StringIO()


    def __enter__(self):
        return self


    def __exit__(self, exception_type, exception, traceback):
        self.close()


    def __repr__(self):
        if self.closed:
            state = 'closed'
        else:
            state = 'open'

        return 'printing.PrintSession: id %d, handle %d, %s' % (self.id, self.handle, state)


    def writable(self):
        return not self.closed


    def write(self, text):
        """ Append *text* to the rendered output. Returns the number of
            characters accepted. Writing to a closed session raises
            :class:`pyvars.errors.TransactionExpired`.
        """

        if self.closed:
            raise errors.TransactionExpired('print session %d is closed' % (self.id))

        text = str(text)
        count = self._buffer.write(text)

        if self._buffer.tell() >= self.limit:
            self._send()

        return count


    def flush(self):
        """ Send any buffered text to the store now.
        """

        if self.closed:
            raise errors.TransactionExpired('print session %d is closed' % (self.id))

        self._send()


    def close(self):
        """ Send any buffered text, then finish the session, releasing the
            reader. The session is released exactly once, even if sending the
            remaining text fails; any failure is raised after the release
            was attempted. Closing a closed session does nothing.
        """

        if self.closed:
            return

        self.closed = True

        try:
            self._send()
        finally:
            self.connection.close_render(self.id)
            logger.debug('print session %d closed', self.id)


    def _send(self):

        text = self._buffer.getvalue()

        if text == '':
            return

        # The buffer is emptied before the send is attempted: text that
        # could not be delivered is not retried.

        self._buffer = io.StringIO()
        self.connection.render_write(self.id, text)


# end of class PrintSession



def open(session, connection=None):
    """ Claim the print session identified by *session*, the context of a
        PRINT event. Returns a (handle, :class:`PrintSession`) tuple, where
        the handle identifies the variable to render. A session can only be
        opened once: opening it again, or opening an id the store does not
        know, raises :class:`pyvars.errors.TransactionExpired`.
    """

    if connection is None:
        connection = store.default()

    session = int(session)
    handle = connection.open_render(session)

    logger.debug('print session %d opened for handle %d', session, handle)
    return (handle, PrintSession(session, handle, connection))



def close(session):
    """ Close the :class:`PrintSession` *session*; see
        :func:`PrintSession.close`.
    """

    session.close()



def render(target, connection=None):
    """ Return the textual rendering of the variable identified by *target*,
        a name or a handle. If another client registered PRINT interest in
        the variable, this blocks until that client closes its print session,
        and returns what it wrote; otherwise the store renders the value
        itself.
    """

    if connection is None:
        connection = store.default()

    handle = variables.to_handle(target, connection)

    if handle is None:
        raise errors.NotFound('no such variable: ' + str(target))

    return connection.render(handle)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
