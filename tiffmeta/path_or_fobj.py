#!/usr/bin/env python3

import contextlib
import io
import shutil
import sys
import tempfile


def is_filelike_object(fobj):
    """
    Check if an object is file-like in that it has a read method.

    :param fobj: the possible filelike-object.
    :returns: True if the object is filelike.
    """
    return hasattr(fobj, 'read')


@contextlib.contextmanager
def OpenPathOrFobj(pathOrObj):
    """
    Given any of a file path, a pathlib Path object, a bytes-like buffer, a
    filelike-object that is seekable, a filelike-object that is not seekable,
    or '-' or None to indicate stdin, return a seekable filelike-object opened
    for binary reading.  The source is never modified.

    :param pathOrObj: one of a file path, pathlib Path, bytes, bytearray,
        memoryview, filelike-object, or None or '-'.
    :yields: a seekable filelike object.
    """
    if isinstance(pathOrObj, (bytes, bytearray, memoryview)):
        yield io.BytesIO(pathOrObj)
        return
    if pathOrObj == '-' or pathOrObj is None:
        pathOrObj = sys.stdin.buffer
    if not is_filelike_object(pathOrObj):
        with open(pathOrObj, 'rb') as fobj:
            yield fobj
    elif hasattr(pathOrObj, 'seekable') and pathOrObj.seekable() and hasattr(pathOrObj, 'tell'):
        yield pathOrObj
    else:
        # Random access is required, so spool unseekable streams.
        with tempfile.TemporaryFile('w+b') as fobj:
            shutil.copyfileobj(pathOrObj, fobj)
            fobj.seek(0)
            yield fobj
