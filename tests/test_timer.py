import time

import pyvars


class Stub:
    """ Just enough of a connection for timers: they only ever touch the
        event queue.
    """

    def __init__(self):
        self.events = pyvars.events.Queue()


# end of class Stub



def drain(queue, window):
    """ Collect every event arriving within *window* seconds.
    """

    received = list()
    deadline = time.time() + window

    while True:
        remaining = deadline - time.time()
        if remaining <= 0:
            break

        event = queue.get(remaining)
        if event is not None:
            received.append((time.time(), event))

    return received



def test_basics():

    stub = Stub()

    pyvars.timer.start(1, 0.1, connection=stub)
    assert pyvars.timer.period(1, connection=stub) == 0.1

    event = stub.events.get(1)
    assert event == (pyvars.TIMER, 1)
    assert event.kind is pyvars.Notify.TIMER


    pyvars.timer.stop(1, connection=stub)
    assert pyvars.timer.period(1, connection=stub) is None

    # Anything already in flight when the timer stopped is discarded.

    drain(stub.events, 0.05)
    assert drain(stub.events, 0.25) == []


    pyvars.timer.start(1, 0.1, connection=stub)
    assert stub.events.get(1) == (pyvars.TIMER, 1)

    pyvars.timer.start(1, period=None, connection=stub)
    # Anything already in flight when the timer stopped is discarded.

    drain(stub.events, 0.05)
    assert drain(stub.events, 0.25) == []

    # Redundant calls should be a no-op.

    pyvars.timer.start(1, period=0, connection=stub)
    pyvars.timer.start(1, period=None, connection=stub)
    pyvars.timer.stop(1, connection=stub)



def test_independent_timers():

    stub = Stub()

    pyvars.timer.start(1, 0.05, connection=stub)
    pyvars.timer.start(2, 0.1, connection=stub)

    received = drain(stub.events, 0.52)

    pyvars.timer.stop(1, connection=stub)
    pyvars.timer.stop(2, connection=stub)

    ones = [event for stamp, event in received if event.context == 1]
    twos = [event for stamp, event in received if event.context == 2]

    assert 9 <= len(ones) <= 11
    assert 4 <= len(twos) <= 6



def test_update_period():

    stub = Stub()

    pyvars.timer.start(3, 10, connection=stub)
    assert drain(stub.events, 0.2) == []

    # Restarting an active timer changes its period.

    pyvars.timer.start(3, 0.05, connection=stub)
    assert pyvars.timer.period(3, connection=stub) == 0.05

    received = drain(stub.events, 0.3)
    pyvars.timer.stop(3, connection=stub)

    assert len(received) >= 4



def test_cadence():

    stub = Stub()

    frequency = 100
    period = 1.0 / frequency
    window = 0.2

    pyvars.timer.start(4, period, connection=stub)
    received = drain(stub.events, window)
    pyvars.timer.stop(4, connection=stub)

    expected = window * frequency
    assert len(received) > expected - 2
    assert len(received) <= expected + 1



def test_connection_gone():
    """ A timer does not keep its connection alive; once the connection is
        gone the timer stops of its own accord.
    """

    stub = Stub()
    key = (stub.events.serial, 5)

    pyvars.timer.start(5, 0.05, connection=stub)
    timer = pyvars.timer.active[key]

    del stub
    timer.thread.join(1)

    assert timer.thread.is_alive() == False
    assert pyvars.timer.active.get(key) is not timer



def test_new_connection_new_timer():
    """ A timer left over from a connection that has gone away is never
        mistaken for the timer of a new connection.
    """

    stub = Stub()
    pyvars.timer.start(6, 10, connection=stub)
    old = pyvars.timer.active[(stub.events.serial, 6)]

    del stub
    stub = Stub()

    pyvars.timer.start(6, 0.05, connection=stub)
    new = pyvars.timer.active[(stub.events.serial, 6)]

    assert new is not old
    assert old.interval == 10
    assert stub.events.get(1) == (pyvars.TIMER, 6)

    pyvars.timer.stop(6, connection=stub)
    old.stop()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
