import logging

from .constants import Datatype, GeoTiffGeoKey, Tag, get_or_create_tag
from .exceptions import InvalidFormatError, MissingReferencedTagError, TruncatedError

logger = logging.getLogger(__name__)


# Datatypes allowed for the GeoKey directory itself.
GEOKEY_DIRECTORY_DATATYPES = (Datatype.BYTE, Datatype.SHORT, Datatype.LONG)


def _referenced_data(ifd, keyid, location):
    """
    Get the data of a tag referenced by a GeoKey.  ASCII data is returned as
    bytes, since GeoKey offsets and counts are in bytes, with several
    null-terminated strings rejoined.
    """
    taginfo = ifd['tags'].get(location)
    if taginfo is None:
        raise MissingReferencedTagError(
            'GeoKey %d references tag %d (0x%X), which is not in the IFD' % (
                keyid, location, location), stage='geokeys', tag=location)
    if location not in Tag or not Tag[location].isGeoKeyStorage():
        logger.warning('GeoKey %d stores its value in tag %s, which is not a GeoKey tag',
                       keyid, get_or_create_tag(location, Tag))
    data = taginfo['data']
    if taginfo['datatype'] == Datatype.ASCII:
        if isinstance(data, list):
            data = '\x00'.join(data)
        if isinstance(data, str):
            data = data.encode()
    return data


def _ascii_value(raw):
    if raw[-1:] == b'|':
        raw = raw[:-1]
    try:
        return raw.decode()
    except UnicodeDecodeError:
        return raw


def parse_geokeys(ifd):
    """
    Parse the GeoKeyDirectoryTag of an IFD.

    The tag holds a multiple of four short values.  The first four are the
    directory version, the key revision, the minor revision, and the number of
    keys.  Each further set of four values is (0) a key id from GeoTiffGeoKey,
    (1) either a 0 to indicate the value is the short stored in the last
    element, or the tag holding the value, usually GeoDoubleParamsTag or
    GeoAsciiParamsTag, (2) the number of values used for this key.  For ASCII
    values this is the number of bytes, (3) either a short value or the
    offset in the data of the referenced tag.

    :param ifd: an ifd with resolved tag data.
    :returns: a dictionary with 'version', 'keyRevision', 'minorRevision',
        'numberOfKeys', and 'keys'.  'keys' maps integer key ids to either an
        integer, a list of values, or a string.  ASCII values that are not
        valid text are bytes.
    """
    taginfo = ifd['tags'][int(Tag.GeoKeyDirectoryTag)]
    if taginfo['datatype'] not in GEOKEY_DIRECTORY_DATATYPES:
        raise InvalidFormatError(
            'GeoKeyDirectoryTag must hold unsigned integers, not %s' % (
                Datatype[taginfo['datatype']].name),
            stage='geokeys', tag=int(Tag.GeoKeyDirectoryTag))
    keys = taginfo['data']
    if len(keys) < 4 or len(keys) < 4 + keys[3] * 4:
        raise TruncatedError(
            'GeoKeyDirectoryTag has %d values, which is too few for its header' % len(keys),
            stage='geokeys', tag=int(Tag.GeoKeyDirectoryTag))
    result = {
        'version': keys[0],
        'keyRevision': keys[1],
        'minorRevision': keys[2],
        'numberOfKeys': keys[3],
        'keys': {},
    }
    for idx in range(4, 4 + keys[3] * 4, 4):
        keyid, location, count, offset = keys[idx:idx + 4]
        if keyid in result['keys']:
            logger.warning('Duplicate GeoKey %d; using the first', keyid)
            continue
        if not location:
            result['keys'][keyid] = offset
            continue
        data = _referenced_data(ifd, keyid, location)
        if offset + count > len(data):
            raise TruncatedError(
                'GeoKey %d needs %d values at %d from tag %d, which only has %d' % (
                    keyid, count, offset, location, len(data)),
                stage='geokeys', tag=keyid)
        value = data[offset:offset + count]
        if ifd['tags'][location]['datatype'] == Datatype.ASCII:
            value = _ascii_value(value)
        result['keys'][keyid] = value
    return result


def geokeys_to_names(geokeys):
    """
    Convert the keys of a parsed GeoKey directory to names.

    :param geokeys: the parsed GeoKey directory from parse_geokeys.
    :returns: a dictionary of GeoKey names to values.  Unknown keys use their
        number as the name.
    """
    return {
        GeoTiffGeoKey[keyid].name if keyid in GeoTiffGeoKey else str(keyid): value
        for keyid, value in geokeys['keys'].items()}
