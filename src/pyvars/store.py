""" The :class:`Connection` to the variable server. The methods defined here
    are the store's primitives: one round trip each, raw tagged values in
    and out, and any failure reported by the store raised as the matching
    :class:`pyvars.errors.VarsError` subclass. The friendlier functions in
    :mod:`pyvars.variables`, :mod:`pyvars.validation` and
    :mod:`pyvars.printing` are built on top of them.

    Most scripts never create a :class:`Connection` themselves; the
    process-wide connection returned by :func:`default` is opened on first
    use, and closed when the interpreter exits.
"""

import atexit
import logging
import threading

from . import config
from . import errors
from . import events
from . import value
from .protocol import message
from .protocol import request


logger = logging.getLogger(__name__)


class Connection:
    """ A connection to the variable server at *hostname* and *port*; the
        defaults come from :func:`pyvars.config.server`. The connection
        holds the queue of events delivered to this client, so any interest
        registered through a connection is tied to it: events for that
        interest only ever come back through the same connection.
    """

    def __init__(self, hostname=None, port=None):

        default_hostname, default_port = config.server()

        if hostname is None:
            hostname = default_hostname
        if port is None:
            port = default_port

        self.hostname = hostname
        self.port = int(port)
        self.timeout = config.timeout()
        self.events = events.Queue()

        self.client = request.Client(hostname, port, self._deliver, config.ack_timeout(), self._lost)
        logger.debug('connected to %s:%d', hostname, self.port)


    def __enter__(self):
        return self


    def __exit__(self, *exception):
        self.close()


    def __repr__(self):
        return 'store.Connection: %s:%d' % (self.hostname, self.port)


    @property
    def closed(self):
        return self.client.closed


    def close(self):
        """ Close the connection. Pending requests are abandoned, and any
            thread blocked in :func:`await_event` is woken up with a
            :class:`pyvars.errors.TransportError`, as is every later call.
        """

        self.events.close('connection to %s:%d closed' % (self.hostname, self.port))
        self.client.close()


    def _lost(self):
        """ Invoked from the background thread of the request client when it
            stops. Unless the connection was closed deliberately, this wakes
            any thread blocked in :func:`await_event` with the news.
        """

        self.events.close('connection to %s:%d lost' % (self.hostname, self.port))


    def _deliver(self, received):
        """ Translate an EVENT message from the store into an
            :class:`pyvars.events.Event` and queue it for :func:`await_event`.
            This is invoked from the background thread of the request client.
        """

        try:
            payload = received.payload.value
            kind = events.to_kind(payload['kind'])
            context = int(payload['context'])
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.exception('discarding malformed event: %r', received)
            return

        self.events.put(events.Event(kind, context))


    def _request(self, type, target=None, content=None):
        """ Send one request and block until the store replies. The payload
            of the reply is returned; an error reported by the store is raised
            as the matching :class:`pyvars.errors.VarsError` subclass.
        """

        payload = message.Payload(content)
        outbound = message.Request(type, target, payload)

        self.client.send(outbound)
        response = outbound.wait(self.timeout)

        if response is None:
            if self.client.closed:
                raise errors.TransportError('%s: connection to %s:%d closed' % (type, self.hostname, self.port))

            self.client.cancel(outbound)
            raise errors.TransportTimeout('%s: no reply from %s:%d in %.1f sec' % (type, self.hostname, self.port, self.timeout))

        reply = response.payload

        if reply is None:
            return message.Payload(None)

        error = reply.error
        if error is not None and error != '':
            raise errors.from_error(error)

        return reply


    def resolve(self, name):
        """ Return the handle for the variable called *name*.
        """

        reply = self._request(message.FIND, name)
        return int(reply.value)


    def read(self, handle):
        """ Return the raw tagged value of the variable at *handle*.
        """

        reply = self._request(message.GET, handle)
        return reply.value


    def write(self, handle, raw):
        """ Store the raw tagged value *raw* in the variable at *handle*. This
            blocks until the store accepts or refuses the write, which may
            involve another client validating it.
        """

        self._request(message.SET, handle, raw)


    def declared_type(self, handle):
        """ Return the :class:`pyvars.value.VarType` declared for the variable
            at *handle*.
        """

        reply = self._request(message.TYPE, handle)
        declared = value.to_type(reply.value)

        if declared is None:
            raise errors.TypeMismatch('store reported an unknown type: ' + repr(reply.value))

        return declared


    def register(self, handle, kind):
        """ Ask the store to raise events of *kind* for the variable at
            *handle*, delivering them to this connection.
        """

        kind = events.to_kind(kind)
        self._request(message.NOTIFY, handle, kind.name)


    def await_event(self, timeout=None):
        """ Return the next :class:`pyvars.events.Event` for this connection,
            or None if *timeout* seconds elapse first.
        """

        return self.events.get(timeout)


    def fetch_validation(self, transaction):
        """ Return the (handle, raw value) pair for a pending validation.
        """

        reply = self._request(message.VALIDATE_START, transaction)
        pending = reply.value

        try:
            handle = int(pending['handle'])
            raw = pending['value']
        except (KeyError, TypeError, ValueError):
            raise errors.VarsError('malformed validation request: ' + repr(pending))

        return (handle, raw)


    def resolve_validation(self, transaction, status):
        """ Accept (*status* zero) or reject (nonzero) a pending validation.
        """

        self._request(message.VALIDATE_END, transaction, int(status))


    def open_render(self, session):
        """ Claim a print session; returns the handle of the variable to
            render.
        """

        reply = self._request(message.PRINT_OPEN, session)
        return int(reply.value)


    def render_write(self, session, text):
        """ Append *text* to the output of an open print session.
        """

        self._request(message.PRINT, session, text)


    def close_render(self, session):
        """ Finish a print session, handing its output to the reader.
        """

        self._request(message.PRINT_CLOSE, session)


    def render(self, handle):
        """ Return the textual rendering of the variable at *handle*. If some
            client registered PRINT interest in the variable, the text is
            whatever that client wrote during its print session.
        """

        reply = self._request(message.RENDER, handle)
        return reply.value


# end of class Connection



_default = None
_default_lock = threading.Lock()


def default():
    """ Return the process-wide :class:`Connection`, opening it on first use.
        After :func:`shutdown` the next call opens a fresh connection; event
        registrations made through the old one do not carry over.
    """

    global _default

    connection = _default

    if connection is None:
        with _default_lock:
            connection = _default

            if connection is None:
                connection = Connection()
                _default = connection

    return connection



def shutdown():
    """ Close the process-wide connection, if it was ever opened.
    """

    global _default

    with _default_lock:
        connection = _default
        _default = None

    if connection is not None:
        connection.close()


atexit.register(shutdown)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
