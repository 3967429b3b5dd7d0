""" The event side of the variable server binding. A process that registers
    interest in a variable (see :func:`pyvars.notify`) is told about activity
    on that variable via events, which accumulate in a per-connection
    :class:`Queue` until the script calls :func:`wait`.

    :func:`wait` is the only call in pyvars that blocks for an open-ended
    amount of time; everything else is a bounded round trip to the store.
"""

import collections
import enum
import itertools
import logging
import queue
import threading

from .errors import TransportError
from . import store


logger = logging.getLogger(__name__)


class Notify(enum.IntEnum):
    """ The kinds of events a script can receive. The first four are also
        the kinds of interest that can be registered against a variable;
        TIMER events come from :mod:`pyvars.timer` instead.
    """

    MODIFIED = 1
    CALC = 2
    VALIDATE = 3
    PRINT = 4
    TIMER = 5


# end of class Notify


registrable = frozenset((Notify.MODIFIED, Notify.CALC, Notify.VALIDATE, Notify.PRINT))

MODIFIED = Notify.MODIFIED
CALC = Notify.CALC
VALIDATE = Notify.VALIDATE
PRINT = Notify.PRINT
TIMER = Notify.TIMER


Event = collections.namedtuple('Event', ('kind', 'context'))
Event.__doc__ = """ A single event returned by :func:`wait`. The meaning of the
    integer *context* depends on the *kind*: the handle of the changed
    variable for MODIFIED, the handle to compute for CALC, a single-use
    transaction id for VALIDATE, a single-use session id for PRINT, and the
    timer id for TIMER.
"""



def to_kind(kind):
    """ Return the :class:`Notify` member for *kind*, which may be a member,
        its integer value, or its (case-insensitive) name.
    """

    if isinstance(kind, Notify):
        return kind

    if isinstance(kind, str):
        try:
            return Notify[kind.upper()]
        except KeyError:
            raise ValueError('unknown notification kind: ' + repr(kind))

    try:
        return Notify(kind)
    except ValueError:
        raise ValueError('unknown notification kind: ' + repr(kind))



class _Closed:
    """ Sentinel placed on a :class:`Queue` when its connection goes away.
    """

    def __init__(self, reason):
        self.reason = reason


_serials = itertools.count(1)


class Queue:
    """ First-in, first-out holding area for events that have arrived but
        have not yet been returned by :func:`wait`. Events are put on the
        queue by the connection's background thread, and by any active
        timers; they are taken off, one per call, by :func:`get`.

        :ivar serial: A number unique to this queue for the life of the
            process, unlike its :func:`id`.
    """

    def __init__(self):
        self._queue = queue.SimpleQueue()
        self._lock = threading.Lock()
        self.closed = False
        self.serial = next(_serials)


    def put(self, event):
        """ Add an :class:`Event` to the queue. Events arriving after the
            queue is closed are discarded.
        """

        # Nothing may land behind the sentinel once the queue is closed.

        with self._lock:
            if self.closed == False:
                self._queue.put(event)
                return

        logger.debug('discarding event after close: %r', event)


    def get(self, timeout=None):
        """ Remove and return the oldest :class:`Event`, blocking until one
            is available. With a *timeout* in seconds, return None if nothing
            arrived in time. Once the queue is closed, and any events that
            arrived beforehand are drained, :class:`TransportError` is raised
            instead of blocking.
        """

        try:
            event = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

        if isinstance(event, _Closed):
            # Leave the sentinel in place for any other waiting threads,
            # and for every future call.
            self._queue.put(event)
            raise TransportError(event.reason)

        return event


    def close(self, reason='connection closed'):
        """ Wake every caller blocked in :func:`get`; they, and every later
            caller, receive a :class:`TransportError` citing *reason*.
        """

        with self._lock:
            if self.closed:
                return

            self.closed = True
            self._queue.put(_Closed(reason))


# end of class Queue



def wait(timeout=None, connection=None):
    """ Block until an event arrives for this process, and return it as an
        :class:`Event` (a *kind*, *context* tuple). Exactly one event is
        returned per call; any others stay queued, in order of arrival, for
        subsequent calls. With a *timeout* in seconds, None is returned if
        no event arrived in time.

        If the connection is closed while waiting, or was already closed,
        :class:`TransportError` is raised.
    """

    if connection is None:
        connection = store.default()

    event = connection.await_event(timeout)

    if event is not None:
        logger.debug('event: %s %d', event.kind.name, event.context)

    return event


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
