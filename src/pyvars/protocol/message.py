""" A class representation of a variable server message, including subclasses
    for specific messages, and the translation of raw multipart frames back
    into :class:`Message` instances.
"""

import itertools
import threading
import time as timemodule

from .. import json


# This is the version of the on-the-wire protocol implemented here, always
# a single byte.

version = b'v'


# Request types, one per store primitive.

FIND = 'FIND'
GET = 'GET'
TYPE = 'TYPE'
SET = 'SET'
NOTIFY = 'NOTIFY'
VALIDATE_START = 'VALIDATE_START'
VALIDATE_END = 'VALIDATE_END'
PRINT_OPEN = 'PRINT_OPEN'
PRINT = 'PRINT'
PRINT_CLOSE = 'PRINT_CLOSE'
RENDER = 'RENDER'

# Response types, and the unsolicited notification pushed by the store.

ACK = 'ACK'
REP = 'REP'
EVENT = 'EVENT'


class Message:
    """ The :class:`Message` is a thin encapsulation of what it means to be a
        message in a variable server context. The fields are in the order they
        appear on the wire, except for the identification number, which goes
        last so that it can be left out and auto-generated where appropriate:
        the message *type*, the *target* of the message (a variable name, a
        handle, or a transaction id, always as a string), the *payload* (a
        :class:`Payload` instance), and the *id*.

        :ivar valid_types: A set of valid strings for the message type.
        :ivar timestamp: A UNIX epoch timestamp for the message creation time.
    """

    valid_types = set((ACK, REP, EVENT))

    def __init__(self, type, target=None, payload=None, id=None):

        if type in self.valid_types:
            pass
        else:
            raise ValueError('invalid message type: ' + repr(type))

        if target is not None:
            target = str(target)

        self.id = id
        self.type = type
        self.target = target
        self.payload = payload
        self.timestamp = timemodule.time()

        self.parts = None


    def __iter__(self):
        self._finalize()
        return iter(self.parts)


    def __repr__(self):
        self._finalize()
        return repr(self.parts)


    def _finalize(self):
        """ Interpret the contents of this :class:`Message` as bytes, and
            prepare the tuple that will be used for the multipart transmission
            on the wire.
        """

        if self.parts is not None:
            return

        id = self.id

        if id is None:
            raise RuntimeError('messages must have an id to be put on the wire')

        try:
            id.decode
        except AttributeError:
            id = ('%08x' % (id)).encode()

        if self.target is None:
            target = b''
        else:
            target = self.target.encode()

        if self.payload is None:
            payload = b''
        else:
            payload = self.payload.encapsulate()

        self.parts = (version, id, self.type.encode(), target, payload)


# end of class Message



class Request(Message):
    """ A :class:`Request` is sent by a client when a response is expected.
        The remote side acknowledges every request immediately, and replies
        once the request is handled; the two events are tracked separately,
        so that a caller can tell a dead store (no ACK) from a slow answer
        (no REP yet).

        :ivar response: The final response to a request (also a Message).
    """

    valid_types = set((FIND, GET, TYPE, SET, NOTIFY,
                       VALIDATE_START, VALIDATE_END,
                       PRINT_OPEN, PRINT, PRINT_CLOSE, RENDER))

    def __init__(self, type, target=None, payload=None, id=None):

        # Nearly all requests are created without an id; the id only needs
        # to be locally unique, so that the response can be tied back to
        # the request that generated it.

        if id is None:
            id = _id_next()

        Message.__init__(self, type, target, payload, id)

        self.response = None
        self.ack_event = threading.Event()
        self.rep_event = threading.Event()


    def __repr__(self):
        self._finalize()
        request = 'REQ: ' + repr(self.parts)

        if self.response is None:
            response = 'REP: None'
        else:
            response = 'REP: ' + repr(tuple(self.response))

        return request + ', ' + response


    def _complete_ack(self):
        """ The request has been acknowledged; release any callers blocking
            in :func:`wait_ack`.
        """

        self.ack_event.set()


    def _complete(self, response):
        """ Store the response locally and release any callers blocking in
            :func:`wait`. A *response* of None means the request was abandoned,
            which happens when the connection is closed underneath it.
        """

        self.response = response
        self.ack_event.set()
        self.rep_event.set()


    def poll(self):
        """ Return True if the request is complete, otherwise return False.
        """

        return self.rep_event.is_set()


    def wait_ack(self, timeout):
        """ Block until the request has been acknowledged. Returns True if
            the acknowledgement arrived, False if *timeout* seconds elapsed
            first; a *timeout* of None blocks indefinitely.
        """

        return self.ack_event.wait(timeout)


    def wait(self, timeout=60):
        """ Block until the request has been handled. The response is always
            returned; it will be None if the request is still pending, or
            was abandoned.
        """

        self.rep_event.wait(timeout)
        return self.response


# end of class Request



class Payload:
    """ A lightweight class to encapsulate a Python-native *value* for
        inclusion in a :class:`Message`. Any keyword arguments become
        additional fields of the payload; they must be serializable as JSON.
    """

    omit = set(('_encapsulated', 'omit'))

    def __init__(self, value=None, time=None, error=None, **kwargs):

        # The 'time' keyword matches the field name in the JSON description
        # of a payload, hence the unusual import of the time module.

        if time is None:
            time = timemodule.time()

        self.error = error
        self.time = time
        self.value = value

        self._encapsulated = None

        for key,value in kwargs.items():
            setattr(self, key, value)


    def __repr__(self):
        return self.encapsulate().decode()


    def encapsulate(self):
        """ Return the JSON encoding of the payload fields, as bytes. The
            encoding is cached after the first call.
        """

        if self._encapsulated:
            return self._encapsulated

        payload = dict()

        for key,value in vars(self).items():
            if key in self.omit:
                continue
            payload[key] = value

        payload = json.dumps(payload)

        self._encapsulated = payload
        return payload


# end of class Payload



def from_parts(parts):
    """ Recreate a :class:`Message` from the multipart *parts* received on
        a socket. Any routing identity prepended by a ROUTER socket must be
        removed by the caller. Requests come back as :class:`Request`
        instances, everything else as a plain :class:`Message`.
    """

    if len(parts) != 5:
        raise ValueError('malformed message: expected 5 parts, got %d' % (len(parts)))

    their_version, id, type, target, payload = parts

    if their_version != version:
        raise ValueError("message is protocol %s, recipient expects %s" % (repr(their_version), repr(version)))

    type = type.decode()

    if target == b'':
        target = None
    else:
        target = target.decode()

    if payload == b'':
        payload = None
    else:
        try:
            payload = json.loads(payload)
        except json.DecodeError as e:
            raise ValueError('malformed message: payload is not JSON') from e

        if isinstance(payload, dict):
            pass
        else:
            raise ValueError('malformed message: payload is not an object: ' + repr(payload))

        payload = Payload(**payload)

    if type in Request.valid_types:
        return Request(type, target, payload, id)
    else:
        return Message(type, target, payload, id)



_id_min = 0
_id_max = 0xFFFFFFFF
_id_lock = threading.Lock()
_id_ticker = itertools.count(_id_min)


def _id_next():
    """ Return the next request identification number, as bytes.
    """

    global _id_ticker

    with _id_lock:
        id = next(_id_ticker)

        if id >= _id_max:
            _id_ticker = itertools.count(_id_min)

    id = '%08x' % (id)
    return id.encode()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
