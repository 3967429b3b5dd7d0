import pytest

import pyvars
import unitstore


@pytest.fixture
def run_varserver():
    """ Start a fresh foil variable server for the duration of one test, and
        point the process-wide pyvars connection at it.
    """

    store = unitstore.Store()

    pyvars.close()
    pyvars.config.server(store.address, store.port)

    yield store

    pyvars.close()
    store.stop()


@pytest.fixture
def connection(run_varserver):
    """ A dedicated connection to the foil, distinct from the process-wide
        connection used when no connection is specified.
    """

    connection = pyvars.Connection(run_varserver.address, run_varserver.port)
    yield connection
    connection.close()


@pytest.fixture
def writer(run_varserver):
    """ A second dedicated connection, standing in for some other client of
        the same variable server.
    """

    writer = pyvars.Connection(run_varserver.address, run_varserver.port)
    yield writer
    writer.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
