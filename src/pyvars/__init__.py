""" Python client for the variable server. A script resolves variable names
    to handles, reads and writes values, and registers interest in activity
    on those variables; it then spends most of its time in :func:`wait`,
    reacting to each event as it arrives: recomputing a value on demand,
    validating a proposed write, or rendering a variable as text.

    Every call uses a process-wide connection to the server unless a
    :class:`Connection` is passed as the *connection* keyword argument.
"""

# Utility components.

from . import json
from . import errors
from . import config
from . import value

# Submodules used by multiple other components.

from . import protocol
from . import store
from . import events

# Primary public-facing interfaces.

from . import variables
find = variables.find
get = variables.get
set = variables.set
notify = variables.notify

wait = events.wait
Event = events.Event
Notify = events.Notify
MODIFIED = events.MODIFIED
CALC = events.CALC
VALIDATE = events.VALIDATE
PRINT = events.PRINT
TIMER = events.TIMER

from . import validation
validate_start = validation.start
validate_end = validation.end
Validation = validation.Validation

from . import printing
open_print_session = printing.open
close_print_session = printing.close
render = printing.render
PrintSession = printing.PrintSession

from . import timer

Connection = store.Connection
close = store.shutdown

VarType = value.VarType

from .errors import VarsError, NotFound, TypeMismatch, TransactionExpired
from .errors import PermissionDenied, Rejected, TransportError, TransportTimeout

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
