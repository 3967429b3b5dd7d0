""" Wire protocol for the variable server: the :mod:`message` classes that
    describe what goes over the wire, and the ZeroMQ :mod:`request` client
    that carries them.
"""

from . import message
from . import request

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
