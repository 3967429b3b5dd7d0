import errno
import threading

import pytest

import pyvars


class Writer(threading.Thread):
    """ Attempt a single set from a background thread, since the set blocks
        until the validator makes up its mind.
    """

    def __init__(self, target, value, connection):
        threading.Thread.__init__(self)
        self.daemon = True

        self.target = target
        self.value = value
        self.connection = connection
        self.error = None
        self.done = False

        self.start()


    def run(self):
        try:
            pyvars.set(self.target, self.value, connection=self.connection)
        except pyvars.VarsError as e:
            self.error = e

        self.done = True


# end of class Writer



def test_reject(run_varserver, connection, writer):
    """ The validator refuses any value of ten or more; the writer's set
        fails with the status the validator chose, and only once the
        validator has ended the transaction.
    """

    handle = pyvars.find('/sys/test/b', connection=connection)
    pyvars.notify(handle, pyvars.VALIDATE, connection=connection)

    attempt = Writer('/sys/test/b', 15, writer)

    kind, context = pyvars.wait(5, connection=connection)
    assert kind == pyvars.VALIDATE

    target, candidate = pyvars.validate_start(context, connection=connection)
    assert target == handle
    assert candidate == 15

    attempt.join(0.3)
    assert attempt.done == False

    if candidate >= 10:
        pyvars.validate_end(context, errno.ERANGE, connection=connection)
    else:
        pyvars.validate_end(context, connection=connection)

    attempt.join(5)
    assert attempt.done == True
    assert isinstance(attempt.error, pyvars.Rejected)
    assert attempt.error.status == errno.ERANGE

    assert pyvars.get(handle, connection=connection) == 0


def test_accept(run_varserver, connection, writer):

    handle = pyvars.find('/sys/test/b', connection=connection)
    pyvars.notify(handle, pyvars.VALIDATE, connection=connection)

    attempt = Writer(handle, 7, writer)

    kind, context = pyvars.wait(5, connection=connection)
    assert kind == pyvars.VALIDATE

    with pyvars.Validation(context, connection=connection) as pending:
        assert pending.handle == handle
        assert pending.value == 7

    attempt.join(5)
    assert attempt.done == True
    assert attempt.error is None

    assert pyvars.get(handle, connection=writer) == 7


def test_start_twice(run_varserver, connection, writer):

    handle = pyvars.find('/sys/test/b', connection=connection)
    pyvars.notify(handle, pyvars.VALIDATE, connection=connection)

    attempt = Writer(handle, 3, writer)
    kind, context = pyvars.wait(5, connection=connection)

    pyvars.validate_start(context, connection=connection)

    with pytest.raises(pyvars.TransactionExpired):
        pyvars.validate_start(context, connection=connection)

    # The failed second start does not consume the transaction; it can still
    # be ended exactly once.

    pyvars.validate_end(context, connection=connection)

    with pytest.raises(pyvars.TransactionExpired):
        pyvars.validate_end(context, connection=connection)

    attempt.join(5)
    assert attempt.error is None


def test_unknown_transaction(run_varserver, connection):

    with pytest.raises(pyvars.TransactionExpired):
        pyvars.validate_start(12345, connection=connection)

    with pytest.raises(pyvars.TransactionExpired):
        pyvars.Validation(12345, connection=connection).__enter__()


def test_validation_scope(run_varserver, connection, writer):
    """ An exception inside the with block refuses the write, ends the
        transaction exactly once, and still propagates.
    """

    handle = pyvars.find('/sys/test/a', connection=connection)
    pyvars.notify(handle, pyvars.VALIDATE, connection=connection)

    attempt = Writer(handle, 9, writer)
    kind, context = pyvars.wait(5, connection=connection)

    scope = pyvars.Validation(context, connection=connection)

    with pytest.raises(ZeroDivisionError):
        with scope:
            scope.value / 0

    assert scope.ended == True
    assert scope.status == errno.EINVAL

    attempt.join(5)
    assert isinstance(attempt.error, pyvars.Rejected)
    assert attempt.error.status == errno.EINVAL

    # Ending again does nothing.

    scope.end()


def test_reject_status():

    scope = pyvars.Validation(1, connection=object())

    with pytest.raises(ValueError):
        scope.reject(0)

    scope.reject(errno.ERANGE)
    assert scope.status == errno.ERANGE

    scope.accept()
    assert scope.status == pyvars.validation.ACCEPT


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
