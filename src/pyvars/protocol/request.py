""" ZeroMQ request/response client for the variable server. A single DEALER
    socket carries the requests, the acknowledgements and replies to those
    requests, and the unsolicited EVENT messages the store pushes at clients
    that registered for notifications.

    ZeroMQ sockets are not thread-safe. Only the background thread of a
    :class:`Client` ever touches its socket: callers hand requests over via
    a queue and wake the thread with a message on an inproc PAIR socket.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Dict, Optional

import zmq

from ..errors import TransportError, TransportTimeout
from . import message


logger = logging.getLogger(__name__)
zmq_context = zmq.Context()


class Client:
    """ Issue requests to the store at *address* and *port*, and relay any
        EVENT messages to the *deliver* callable, if one is provided. The
        *ack_timeout* (in seconds) bounds how long :func:`send` waits for the
        store to acknowledge a request before declaring the store absent.
        The *on_close* callable, if provided, is invoked from the background
        thread once it stops, for whatever reason.
    """

    ack_timeout = 1.0

    def __init__(self, address: str, port: int,
                 deliver: Optional[Callable[[message.Message], None]] = None,
                 ack_timeout: Optional[float] = None,
                 on_close: Optional[Callable[[], None]] = None):

        self.address = address
        self.port = int(port)
        self.deliver = deliver
        self.on_close = on_close
        self.closed = False

        if ack_timeout is not None:
            self.ack_timeout = float(ack_timeout)

        server = "tcp://%s:%d" % (address, self.port)
        identity = "pyvars.Client.%d" % (id(self))
        self.identity = identity.encode()

        self.socket = zmq_context.socket(zmq.DEALER)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.identity = self.identity
        self.socket.connect(server)

        self._outbox = queue.SimpleQueue()
        self._pending: Dict[bytes, message.Request] = {}

        internal = "inproc://pyvars.Client.signal.%d" % (id(self))
        self._signal_rx = zmq_context.socket(zmq.PAIR)
        self._signal_rx.bind(internal)
        self._signal_tx = zmq_context.socket(zmq.PAIR)
        self._signal_tx.connect(internal)
        self._signal_lock = threading.Lock()

        self._thread = threading.Thread(target=self.run, daemon=True)
        self._thread.start()


    def close(self):
        """ Shut down the background thread and release the sockets. Any
            requests still waiting on a reply are abandoned: their
            :func:`message.Request.wait` returns None immediately.
        """

        if self.closed:
            return

        self.closed = True

        try:
            self._signal(None)
        except TransportError:
            # The background thread already went away on its own.
            return

        if threading.current_thread() is not self._thread:
            self._thread.join()


    def _handle_incoming(self, parts) -> None:

        try:
            received = message.from_parts(parts)
        except (ValueError, TypeError):
            logger.exception('discarding malformed message from %s:%d', self.address, self.port)
            return

        if received.type == message.EVENT:
            if self.deliver is None:
                logger.debug('no recipient for event: %r', received)
            else:
                self.deliver(received)
            return

        pending = self._pending.get(received.id)
        if pending is None:
            # The original caller's request is gone, no further processing
            # is possible.
            return

        if received.type == message.ACK:
            pending._complete_ack()
            return

        pending._complete(received)
        del self._pending[received.id]


    def _handle_outgoing(self) -> bool:
        """ Clear one signal and send one request. Returns False when the
            dequeued item is the request to shut down.
        """

        self._signal_rx.recv(flags=zmq.NOBLOCK)
        request = self._outbox.get(block=False)

        if request is None:
            return False

        if isinstance(request, _Cancel):
            self._pending.pop(request.id, None)
            return True

        self._pending[request.id] = request
        self.socket.send_multipart(tuple(request))
        return True


    def _signal(self, request) -> None:

        self._outbox.put(request)

        # The PAIR socket is shared by every calling thread.

        with self._signal_lock:
            try:
                self._signal_tx.send(b'')
            except zmq.ZMQError as e:
                raise TransportError('connection to %s:%d is closed' % (self.address, self.port)) from e


    def run(self) -> None:

        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)
        poller.register(self._signal_rx, zmq.POLLIN)

        running = True

        try:
            while running:
                for active, _flag in poller.poll(10000):
                    if active == self._signal_rx:
                        running = self._handle_outgoing()
                    elif active == self.socket:
                        parts = self.socket.recv_multipart()
                        self._handle_incoming(parts)
                    if running == False:
                        break
        except Exception:
            # There is no caller to raise to; the failure is reported to
            # everyone waiting on this client via on_close().
            logger.exception('request client for %s:%d failed', self.address, self.port)
        finally:
            self.closed = True
            self._abandon()
            self.socket.close()
            self._signal_rx.close()

            with self._signal_lock:
                self._signal_tx.close()

            if self.on_close is not None:
                self.on_close()


    def _abandon(self) -> None:
        """ Release every caller still waiting on this client.
        """

        pending = list(self._pending.values())
        self._pending.clear()

        while True:
            try:
                request = self._outbox.get(block=False)
            except queue.Empty:
                break
            if isinstance(request, message.Request):
                pending.append(request)

        for request in pending:
            request._complete(None)


    def send(self, request: message.Request) -> message.Request:
        """ Send a fully populated :class:`message.Request`. This method blocks
            until the store acknowledges the request; the caller decides
            whether to block for the full response by calling
            :func:`message.Request.wait`.
        """

        if self.closed:
            raise TransportError('connection to %s:%d is closed' % (self.address, self.port))

        self._signal(request)

        ack = request.wait_ack(self.ack_timeout)

        if ack == False:
            self.cancel(request)
            raise TransportTimeout("%s: no response from %s:%d in %.2f sec" % (request.type, self.address, self.port, self.ack_timeout))

        if request.poll() and request.response is None:
            raise TransportError('connection to %s:%d closed before %s was sent' % (self.address, self.port, request.type))

        return request


    def cancel(self, request: message.Request) -> None:
        """ Stop tracking *request*; a reply arriving later is discarded.
            This is how a caller gives up on a request that took too long.
        """

        if self.closed:
            return

        try:
            self._signal(_Cancel(request.id))
        except TransportError:
            # The background thread is gone, and the pending requests
            # were abandoned along with it.
            return


# end of class Client



class _Cancel:
    """ Outbox entry asking the background thread to forget a request.
    """

    def __init__(self, id):
        self.id = id


# end of class _Cancel


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
