""" Locate the variable server and establish the timeouts used when talking
    to it. Every setting can come from the environment, and every setting can
    be overridden by calling the accessor with an explicit value; changes to
    the environment are ignored once a setting has been read.
"""

import os


default_hostname = 'localhost'
default_port = 10079
default_ack_timeout = 1.0
default_timeout = 60


def server(hostname=None, port=None):
    """ Return the (hostname, port) tuple where the variable server can be
        contacted. This defaults to ``localhost:10079``, but can be overridden
        by calling this method with a new *hostname* and/or *port*, or by
        setting the ``VARSERVER_HOST`` and ``VARSERVER_PORT`` environment
        variables prior to the first invocation of this method.
    """

    if hostname is not None:
        hostname = str(hostname)
        os.environ['VARSERVER_HOST'] = hostname
        server.hostname = hostname

    if port is not None:
        port = int(port)
        os.environ['VARSERVER_PORT'] = str(port)
        server.port = port

    if server.hostname is None:
        server.hostname = os.environ.get('VARSERVER_HOST', default_hostname)

    if server.port is None:
        try:
            found = os.environ['VARSERVER_PORT']
        except KeyError:
            server.port = default_port
        else:
            server.port = _number(found, 'VARSERVER_PORT', int)

    return (server.hostname, server.port)

server.hostname = None
server.port = None



def ack_timeout(seconds=None):
    """ Return the number of seconds a client waits for the server to
        acknowledge a request before declaring the server unreachable.
        Set with ``VARSERVER_ACK_TIMEOUT``, or by passing *seconds*.
    """

    if seconds is not None:
        ack_timeout.found = float(seconds)

    if ack_timeout.found is None:
        try:
            found = os.environ['VARSERVER_ACK_TIMEOUT']
        except KeyError:
            ack_timeout.found = default_ack_timeout
        else:
            ack_timeout.found = _number(found, 'VARSERVER_ACK_TIMEOUT', float)

    return ack_timeout.found

ack_timeout.found = None



def timeout(seconds=None):
    """ Return the number of seconds a client waits for the reply to an
        acknowledged request. Some replies are deferred by the server until
        another client finishes its part of the exchange (a validated write,
        a computed read, a rendered print request), which is why this is
        much longer than the acknowledgement timeout. Set with
        ``VARSERVER_TIMEOUT``, or by passing *seconds*.
    """

    if seconds is not None:
        timeout.found = float(seconds)

    if timeout.found is None:
        try:
            found = os.environ['VARSERVER_TIMEOUT']
        except KeyError:
            timeout.found = default_timeout
        else:
            timeout.found = _number(found, 'VARSERVER_TIMEOUT', float)

    return timeout.found

timeout.found = None



def reset():
    """ Forget any settings read so far; the next call to an accessor will
        consult the environment again.
    """

    server.hostname = None
    server.port = None
    ack_timeout.found = None
    timeout.found = None



def _number(found, name, cast):

    try:
        return cast(found)
    except ValueError:
        raise ValueError("%s must be a number, not %s" % (name, repr(found)))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
