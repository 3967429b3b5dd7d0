import threading
import time

import pytest

import pyvars


def test_modified(run_varserver, connection, writer):

    handle = pyvars.find('/sys/test/a', connection=connection)
    pyvars.notify(handle, pyvars.MODIFIED, connection=connection)

    pyvars.set('/sys/test/a', 5, connection=writer)

    event = pyvars.wait(5, connection=connection)
    assert event is not None
    assert event.kind == pyvars.MODIFIED
    assert event.context == handle

    kind, context = event
    assert kind is pyvars.Notify.MODIFIED
    assert pyvars.get(context, connection=connection) == 5

    # Exactly one event per write.

    assert pyvars.wait(0.2, connection=connection) is None


def test_fifo(run_varserver, connection, writer):

    a = pyvars.find('/sys/test/a', connection=connection)
    b = pyvars.find('/sys/test/b', connection=connection)
    pyvars.notify(a, pyvars.MODIFIED, connection=connection)
    pyvars.notify(b, pyvars.MODIFIED, connection=connection)

    pyvars.set(b, 1, connection=writer)
    pyvars.set(a, 1, connection=writer)
    pyvars.set(b, 2, connection=writer)

    contexts = list()
    for count in range(3):
        event = pyvars.wait(5, connection=connection)
        contexts.append(event.context)

    assert contexts == [b, a, b]


def test_wait_blocks(run_varserver, connection, writer):
    """ A wait with nothing pending blocks until someone else acts on a
        registered variable.
    """

    handle = pyvars.find('/sys/test/c', connection=connection)
    pyvars.notify(handle, pyvars.MODIFIED, connection=connection)

    received = list()

    def waiter():
        received.append(pyvars.wait(10, connection=connection))

    thread = threading.Thread(target=waiter)
    thread.start()

    thread.join(0.3)
    assert thread.is_alive() == True
    assert received == []

    pyvars.set(handle, 'wake up', connection=writer)

    thread.join(5)
    assert thread.is_alive() == False
    assert received == [(pyvars.MODIFIED, handle)]


def test_timeout(run_varserver, connection):

    begin = time.time()
    assert pyvars.wait(0.2, connection=connection) is None
    elapsed = time.time() - begin

    assert elapsed >= 0.15


def test_close_wakes_wait(run_varserver):

    connection = pyvars.Connection(run_varserver.address, run_varserver.port)
    raised = list()

    def waiter():
        try:
            pyvars.wait(connection=connection)
        except pyvars.TransportError as e:
            raised.append(e)

    thread = threading.Thread(target=waiter)
    thread.start()

    thread.join(0.2)
    assert thread.is_alive() == True

    connection.close()

    thread.join(5)
    assert thread.is_alive() == False
    assert len(raised) == 1

    # Every later wait fails the same way, immediately.

    with pytest.raises(pyvars.TransportError):
        pyvars.wait(connection=connection)


def test_queue():

    queue = pyvars.events.Queue()
    queue.put(pyvars.Event(pyvars.MODIFIED, 1))
    queue.put(pyvars.Event(pyvars.CALC, 2))
    queue.close('gone')

    # Events that arrived before the close are still delivered, in order.

    assert queue.get() == (pyvars.MODIFIED, 1)
    assert queue.get() == (pyvars.CALC, 2)

    with pytest.raises(pyvars.TransportError):
        queue.get()

    queue.put(pyvars.Event(pyvars.PRINT, 3))

    with pytest.raises(pyvars.TransportError):
        queue.get(0)


def test_close_while_delivering():
    """ Once a get has reported the close, every later get does too, even
        with events still being put while the queue was closed.
    """

    queue = pyvars.events.Queue()

    def feed():
        for count in range(20000):
            queue.put(pyvars.Event(pyvars.MODIFIED, count))

    thread = threading.Thread(target=feed)
    thread.start()

    time.sleep(0.001)
    queue.close('gone')
    thread.join()

    contexts = list()

    while True:
        try:
            event = queue.get(0)
        except pyvars.TransportError:
            break

        assert event is not None
        contexts.append(event.context)

    assert contexts == list(range(len(contexts)))

    for count in range(3):
        with pytest.raises(pyvars.TransportError):
            queue.get(0)


def test_kinds():

    assert pyvars.events.to_kind('calc') is pyvars.CALC
    assert pyvars.events.to_kind(3) is pyvars.VALIDATE
    assert pyvars.events.to_kind(pyvars.PRINT) is pyvars.PRINT

    with pytest.raises(ValueError):
        pyvars.events.to_kind(0)

    with pytest.raises(ValueError):
        pyvars.events.to_kind('never')

    assert pyvars.TIMER not in pyvars.events.registrable


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
