""" Select the fastest JSON codec available for encoding and decoding message
    payloads. :func:`dumps` always returns bytes, regardless of which library
    is doing the work, since the result goes straight onto a ZeroMQ frame.
    :class:`DecodeError` is whatever the selected library raises for input
    that is not valid JSON.
"""

msgspec = None
orjson = None

try:
    import msgspec
except ImportError:
    try:
        import orjson
    except ImportError:
        import json as _stdlib


if msgspec is not None:
    _encoder = msgspec.json.Encoder()
    _decoder = msgspec.json.Decoder()

    dumps = _encoder.encode
    loads = _decoder.decode
    DecodeError = msgspec.DecodeError
    backend = 'msgspec'

elif orjson is not None:
    dumps = orjson.dumps
    loads = orjson.loads
    DecodeError = orjson.JSONDecodeError
    backend = 'orjson'

else:
    def dumps(thing):
        return _stdlib.dumps(thing, separators=(',', ':')).encode()

    loads = _stdlib.loads
    DecodeError = _stdlib.JSONDecodeError
    backend = 'json'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
