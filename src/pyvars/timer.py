""" Periodic TIMER events. A script whose only suspension point is
    :func:`pyvars.wait` can still do periodic work: :func:`start` a timer,
    and an ``Event(TIMER, timer_id)`` arrives through the same wait every
    *period* seconds, in between whatever events the store delivers.
"""

import threading
import time
import weakref

from . import events
from . import store


active = dict()
active_lock = threading.Lock()


def period(timer_id, connection=None):
    """ Return the currently set period for the timer *timer_id*. Returns
        None if that timer is not active.
    """

    key = _key(timer_id, connection)

    try:
        timer = active[key]
    except KeyError:
        return None

    return timer.interval



def start(timer_id, period, connection=None):
    """ Deliver a TIMER event with the integer *timer_id* as its context every
        *period* seconds. A dedicated background thread is used for each
        timer. If the timer is already active its period is updated, and a
        new cadence begins; a *period* of None or zero stops the timer.

        The timer does not keep the connection alive: once the connection is
        garbage collected, the timer stops on its own.
    """

    if period is None or period == 0:
        stop(timer_id, connection)
        return

    if connection is None:
        connection = store.default()

    key = _key(timer_id, connection)

    with active_lock:
        try:
            timer = active[key]
        except KeyError:
            timer = _Timer(key, int(timer_id), connection.events)
            active[key] = timer

    timer.period(period)



def stop(timer_id, connection=None):
    """ Discontinue the timer *timer_id*.
    """

    key = _key(timer_id, connection)

    with active_lock:
        try:
            timer = active.pop(key)
        except KeyError:
            return

    timer.stop()



def _key(timer_id, connection):

    if connection is None:
        connection = store.default()

    return (connection.events.serial, int(timer_id))



class _Timer:
    """ Background thread to feed TIMER events to an event queue.
    """

    def __init__(self, key, timer_id, queue):

        self.key = key
        self.timer_id = timer_id
        self.interval = None
        self.reference = weakref.WeakMethod(queue.put)
        self.shutdown = False

        self.alarm = threading.Event()
        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()


    def period(self, period):
        """ Update the timer interval to *period* seconds.
        """

        period = float(period)

        if period <= 0:
            raise ValueError('the timer period must be positive')

        self.interval = period
        self.wake()


    def run(self):

        interval = None
        next = time.time()

        # Initial wait for someone to call self.period().

        while self.interval is None and self.shutdown == False:
            self.alarm.wait(1)

        while True:
            begin = time.time()

            if self.shutdown == True:
                break

            if self.alarm.is_set() == True:
                self.alarm.clear()

                # A new interval starts an entirely new cadence; the first
                # event is one full interval after the change.

                interval = self.interval
                next = begin + interval

            else:
                # Keep the cadence steady regardless of when we actually woke
                # up: the next deadline is always the previous deadline plus
                # the interval.

                put = self.reference()

                if put is None:
                    # The event queue is gone, and with it the connection.
                    break

                put(events.Event(events.TIMER, self.timer_id))
                del put

                next += interval

            delay = next - time.time()
            if delay > 0:
                self.alarm.wait(delay)


        # Infinite loop exited.

        with active_lock:
            if active.get(self.key) is self:
                del active[self.key]


    def stop(self):
        self.shutdown = True
        self.wake()


    def wake(self):
        self.alarm.set()


# end of class _Timer


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
