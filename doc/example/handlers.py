""" A small pyvars script exercising every kind of event: it bumps a counter
    on startup, then sits in its wait loop reporting changes to
    /sys/test/a, vetoing large writes to /sys/test/b, recomputing /sys/test/f
    whenever someone reads it, and rendering /sys/test/c as text.
"""

import errno
import pyvars


def main():

    a = pyvars.get('/sys/test/a')
    b = pyvars.get('/sys/test/b')
    c = pyvars.get('/sys/test/c')
    f = pyvars.get('/sys/test/f')

    if a is not None:
        print('a = %d' % (a))
        pyvars.set('/sys/test/a', a + 1)
        print('a = %d' % (pyvars.get('/sys/test/a')))

    if b is not None:
        print('b = %d' % (b))

    if c is not None:
        print('c = %s' % (c))

    if f is not None:
        print('f = %f' % (f))

    handles = Handles()

    pyvars.notify(handles.a, pyvars.MODIFIED)
    pyvars.notify(handles.b, pyvars.VALIDATE)
    pyvars.notify(handles.f, pyvars.CALC)
    pyvars.notify(handles.c, pyvars.PRINT)

    # Heartbeat, once a minute.
    pyvars.timer.start(1, 60)

    count = 0

    while True:
        kind, context = pyvars.wait()
        print('Received %s: %d' % (kind.name, context))

        if kind == pyvars.MODIFIED:
            if context == handles.a:
                print('/sys/test/a changed to %d' % (pyvars.get(context)))

        elif kind == pyvars.VALIDATE:
            with pyvars.Validation(context) as pending:
                if pending.handle == handles.b and pending.value >= 10:
                    print('Disallow write of %d to /sys/test/b' % (pending.value))
                    pending.reject(errno.ERANGE)
                else:
                    print('Allow write of %s' % (pending.value))

        elif kind == pyvars.CALC:
            if context == handles.f:
                f = pyvars.get(context) + 3.1415926535
                pyvars.set(context, f)

        elif kind == pyvars.PRINT:
            handle, session = pyvars.open_print_session(context)

            with session:
                if handle == handles.c:
                    session.write('Hello from Python!\n')
                    session.write('The counter is %d\n' % (count))

            count += 1

        elif kind == pyvars.TIMER:
            print('still here, %d print requests so far' % (count))



class Handles:

    def __init__(self):
        self.a = pyvars.find('/sys/test/a')
        self.b = pyvars.find('/sys/test/b')
        self.c = pyvars.find('/sys/test/c')
        self.f = pyvars.find('/sys/test/f')


if __name__ == '__main__':
    main()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
