#!/usr/bin/env python3

import logging
import os
import struct

from .constants import Datatype, Tag
from .exceptions import (InvalidFormatError, TruncatedError, UnsupportedTypeError,
                         ValueOverflowError)
from .geotiff_utils import parse_geokeys
from .path_or_fobj import OpenPathOrFobj

logger = logging.getLogger(__name__)

TIFF_HEADERS = {
    b'II\x2a\x00': '<',
    b'MM\x00\x2a': '>',
}
IFD_ENTRY_SIZE = 12
# Values are addressed by 32-bit offsets, so no value can be larger than this.
MAX_VALUE_BYTES = 0xFFFFFFFF


def check_offset(filelen, offset, length, stage=None, tag=None):
    """
    Check if a specific number of bytes can be read from a file at a given
    offset.

    :param filelen: the length of the file.
    :param offset: an absolute offset in the file.
    :param length: the number of bytes to read.
    :param stage: the decoding stage, used in the error.
    :param tag: the tag being decoded, if any, used in the error.
    :raises TruncatedError: if the range is not within the file.
    """
    if offset < 0 or length < 0 or offset + length > filelen:
        raise TruncatedError(
            'Cannot read %d (0x%x) bytes from desired offset %d (0x%x); the '
            'file is %d bytes long' % (length, length, offset, offset, filelen),
            stage=stage, tag=tag)


def read_at(tiff, info, offset, length, stage=None, tag=None):
    """
    Read a range of bytes from the tiff file after checking that the range is
    within the file.

    :param tiff: the open tiff file object.
    :param info: the file information dictionary with the file 'size'.
    :param offset: an absolute offset in the file.
    :param length: the number of bytes to read.
    :param stage: the decoding stage, used in errors.
    :param tag: the tag being decoded, if any, used in errors.
    :returns: the bytes read.
    """
    check_offset(info['size'], offset, length, stage, tag)
    tiff.seek(offset)
    data = tiff.read(length)
    if len(data) != length:
        raise TruncatedError(
            'Read %d bytes instead of %d from offset %d (0x%x)' % (
                len(data), length, offset, offset), stage=stage, tag=tag)
    return data


def read_tiff(path):
    """
    Read the non-imaging data from a TIFF and return a Python structure with
    the results.

    The output is an "info" dictionary containing the following keys:
    - ifds: a list of ifd records in the order of the IFD chain.
    - size: the total length of the tiff file in bytes.
    - header: the first four bytes of the tiff file
    - bigEndian: True if big endian, False if little endian
    - endianPack: the byte-ordering-mark for struct.unpack (either '<' or '>')
    - firstifd: the offset of the first IFD in the file.
    Each IFD is a dictionary as returned by read_ifd.

    :param path: the file path, stream, or bytes to read.
    :returns: a dictionary of information on the tiff file.
    """
    info = {
        'ifds': [],
    }
    with OpenPathOrFobj(path) as tiff:
        tiff.seek(0, os.SEEK_END)
        info['size'] = tiff.tell()
        tiff.seek(0)
        read_header(tiff, info)
        seen = set()
        nextifd = info['firstifd']
        while nextifd:
            if nextifd in seen:
                logger.warning(
                    'IFD at offset %d (0x%x) is referenced more than once', nextifd, nextifd)
                break
            seen.add(nextifd)
            ifd = read_ifd(tiff, info, nextifd)
            info['ifds'].append(ifd)
            nextifd = ifd['nextifd']
    logger.debug('read_tiff: %s', info)
    return info


def read_header(tiff, info):
    """
    Read the tiff header.  This determines the byte order used by the rest of
    the file.

    :param tiff: the open tiff file object.
    :param info: the file information dictionary with the file 'size'.  This
        is modified to add 'header', 'bigEndian', 'endianPack', and
        'firstifd'.
    :returns: the offset of the first IFD.
    """
    tiff.seek(0)
    header = tiff.read(4)
    if header not in TIFF_HEADERS:
        raise InvalidFormatError('Not a known tiff header: %r' % header, stage='header')
    info['header'] = header
    info['endianPack'] = bom = TIFF_HEADERS[header]
    info['bigEndian'] = bom == '>'
    info['firstifd'] = struct.unpack(bom + 'L', read_at(tiff, info, 4, 4, 'header'))[0]
    return info['firstifd']


def read_ifd(tiff, info, ifdOffset):
    """
    Read and resolve a single IFD.  This only depends on the byte order and
    size in the info dictionary, so any IFD whose offset is known can be read
    independently of the others.

    The IFD is a dictionary containing the following keys:
    - offset: the offset of this ifd.
    - size, bigEndian, endianPack: copied from the file's info dictionary.
    - tagcount: number of entries in the IFD.
    - tags: a dictionary of tags in this IFD in file order.  The keys are the
        integer tag values.  If a tag is repeated, the first entry is used.
    - duplicates: a list of tag values that were repeated in the IFD.
    - nextifd: the offset of the next IFD in the chain or 0.
    - geokeys: the parsed GeoKey directory or None.
    Each IFD tag is a dictionary containing the following keys:
    - datatype: the integer datatype of the tag.
    - count: the number of elements in the tag.  For RATIONAL and SRATIONAL,
        this is the number of pairs.  For ASCII, this is the length in bytes
        including terminating nulls.  For UNDEFINED, this is the length in
        bytes.
    - datapos: the offset within the file (always within the IFD) of the value
        field.
    - valuefield: the four raw bytes of the value field.
    - [offset]: if the value does not fit in the value field, this is the
        offset within the file of the data.
    - data: the decoded values; see decode_tag_data.

    :param tiff: the open tiff file object.
    :param info: the file information dictionary with 'size' and
        'endianPack'.
    :param ifdOffset: byte location in file of this ifd.
    :returns: the ifd record.
    """
    logger.debug(f'read_ifd: {ifdOffset} (0x{ifdOffset:X})')
    bom = info['endianPack']
    tagcount = struct.unpack(bom + 'H', read_at(tiff, info, ifdOffset, 2, 'ifd'))[0]
    rawifd = read_at(tiff, info, ifdOffset + 2, tagcount * IFD_ENTRY_SIZE + 4, 'ifd')
    ifd = {
        'offset': ifdOffset,
        'size': info['size'],
        'bigEndian': info['bigEndian'],
        'endianPack': bom,
        'tagcount': tagcount,
        'tags': {},
        'duplicates': [],
    }
    for pos in range(0, tagcount * IFD_ENTRY_SIZE, IFD_ENTRY_SIZE):
        tag, datatype, count = struct.unpack(bom + 'HHL', rawifd[pos:pos + 8])
        taginfo = {
            'datatype': datatype,
            'count': count,
            'datapos': ifdOffset + 2 + pos + 8,
            'valuefield': rawifd[pos + 8:pos + IFD_ENTRY_SIZE],
        }
        if tag in ifd['tags']:
            logger.warning('Duplicate tag %d: data at %d and %d; using the first' % (
                tag, ifd['tags'][tag]['datapos'], taginfo['datapos']))
            ifd['duplicates'].append(tag)
            continue
        ifd['tags'][tag] = taginfo
    ifd['nextifd'] = struct.unpack(bom + 'L', rawifd[-4:])[0]
    for tag, taginfo in ifd['tags'].items():
        resolve_tag_data(tiff, info, tag, taginfo)
    ifd['geokeys'] = (
        parse_geokeys(ifd) if int(Tag.GeoKeyDirectoryTag) in ifd['tags'] else None)
    return ifd


def resolve_tag_data(tiff, info, tag, taginfo):
    """
    Get the values of a tag, either from the value field or, if they do not
    fit, from the offset stored in the value field.

    :param tiff: the open tiff file object.
    :param info: the file information dictionary with 'size' and
        'endianPack'.
    :param tag: the integer tag; used for errors.
    :param taginfo: the tag record.  This is modified to add 'data' and,
        possibly, 'offset'.
    :returns: the decoded data.
    """
    if taginfo['datatype'] not in Datatype:
        raise UnsupportedTypeError(
            'Unknown datatype %d (0x%X) in tag %d (0x%X)' % (
                taginfo['datatype'], taginfo['datatype'], tag, tag),
            stage='value', tag=tag)
    datatype = Datatype[taginfo['datatype']]
    length = taginfo['count'] * (datatype.size or 1)
    if length > MAX_VALUE_BYTES:
        raise ValueOverflowError(
            'Tag %d (0x%X) has %d %s values, which exceeds the addressable size' % (
                tag, tag, taginfo['count'], datatype.name),
            stage='value', tag=tag)
    if length <= len(taginfo['valuefield']):
        rawdata = taginfo['valuefield'][:length]
    else:
        taginfo['offset'] = struct.unpack(info['endianPack'] + 'L', taginfo['valuefield'])[0]
        rawdata = read_at(tiff, info, taginfo['offset'], length, 'value', tag)
    taginfo['data'] = decode_tag_data(datatype, taginfo['count'], rawdata, info['endianPack'])
    return taginfo['data']


def decode_tag_data(datatype, count, rawdata, bom):
    """
    Decode the raw bytes of a tag.

    :param datatype: the Datatype of the tag.
    :param count: the number of elements.
    :param rawdata: the raw bytes; this must be the exact length needed.
    :param bom: the struct byte-order mark.
    :returns: a list of integers or floats for numeric types, a list of
        (numerator, denominator) tuples for rational types, bytes for
        UNDEFINED, and for ASCII, a string or, if there is more than one
        null-terminated string, a list of strings.  ASCII that isn't valid
        text is returned as bytes.
    """
    if datatype.pack:
        values = list(struct.unpack(
            '%s%d%s' % (bom, count * len(datatype.pack), datatype.pack[0]), rawdata))
        if len(datatype.pack) == 2:
            values = list(zip(values[0::2], values[1::2]))
        return values
    if datatype == Datatype.ASCII:
        try:
            strings = [part.decode() for part in bytes(rawdata).rstrip(b'\x00').split(b'\x00')]
        except UnicodeDecodeError:
            return bytes(rawdata)
        return strings[0] if len(strings) == 1 else strings
    return bytes(rawdata)


def iter_raw_blocks(path, imageInfo):
    """
    Yield the undecoded bytes of each strip or tile of an image so they can be
    passed to a decompressor.  No predictor or decompression is applied.

    :param path: the file path, stream, or bytes that the image was read from.
    :param imageInfo: an image information dictionary from get_image_info.
    :yields: the raw bytes of each block in file order.
    """
    with OpenPathOrFobj(path) as tiff:
        tiff.seek(0, os.SEEK_END)
        info = {'size': tiff.tell()}
        for idx, (offset, bytecount) in enumerate(zip(imageInfo['offsets'], imageInfo['bytecounts'])):
            logger.debug('Reading block %d: %d bytes at %d', idx, bytecount, offset)
            yield read_at(tiff, info, offset, bytecount, 'block')
