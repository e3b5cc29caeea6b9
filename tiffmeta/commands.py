import argparse
import json
import logging
import sys

import yaml

from .constants import Datatype, GeoTiffGeoKey, GeoTiffTransformations, Tag, get_or_create_tag
from .exceptions import InvalidFormatError, MissingTagError, TiffmetaException, UnsupportedError
from .geotiff_utils import geokeys_to_names
from .imagemode import resolve_image_mode
from .tiffmeta import read_tiff

logger = logging.getLogger(__name__)

# Errors that mean an IFD has no image mode, but is otherwise readable.
MODE_ERRORS = (UnsupportedError, MissingTagError, InvalidFormatError)


class ThrowOnLevelHandler(logging.NullHandler):
    def handle(self, record):
        raise TiffmetaException(record.getMessage())


def _format_value(datatype, val):
    if datatype in (Datatype.RATIONAL, Datatype.SRATIONAL):
        num, den = val
        return '%d/%d' % (num, den) + (' (%.8g)' % (num / den) if den else '')
    if datatype in (Datatype.FLOAT, Datatype.DOUBLE):
        return '%.10g' % val
    return '%d' % val


def _tiff_dump_tag(tag, taginfo, linePrefix, max, dest=None):
    """
    Print a tag to a stream.

    :param tag: the TiffTag class of the tag that should be printed.
    :param taginfo: a dictionary with 'data' and 'datatype' with tag information.
    :param linePrefix: a string to put in front of the output.  This is usually
        whitespace.
    :param max: the maximum number of data values to print.
    :param dest: the stream to print results to.
    """
    dest = sys.stdout if dest is None else dest
    datatype = Datatype[taginfo['datatype']]
    data = taginfo['data']
    dest.write('%s  %s %s:' % (linePrefix, tag, datatype.name))
    if datatype.pack:
        if len(data) != 1:
            dest.write(' <%d>' % len(data))
        for val in data[:max]:
            dest.write(' ' + _format_value(datatype, val))
            if 'enum' in tag and val in tag.enum:
                dest.write(' (%s)' % tag.enum[val].name)
        if len(data) > max:
            dest.write(' ...')
    elif datatype == Datatype.ASCII and not isinstance(data, bytes):
        dest.write(' %s' % (data if isinstance(data, str) else ' | '.join(data)))
    else:
        dest.write(' <%d> %r' % (len(data), data[:max]))
        if len(data) > max:
            dest.write(' ...')
    dest.write('\n')


def _tiff_dump_ifds(ifds, max, dest=None, linePrefix=''):
    """
    Print a list of ifds to a stream.

    :param ifds: the list of ifds.
    :param max: the maximum number of data values to print.
    :param dest: the stream to print results to.
    :param linePrefix: a string to put in front of each line.  This is usually
        whitespace.
    """
    dest = sys.stdout if dest is None else dest
    for idx, ifd in enumerate(ifds):
        dest.write('%sDirectory %d: offset %d (0x%x)\n' % (
            linePrefix, idx, ifd['offset'], ifd['offset']))
        for tag, taginfo in sorted(ifd['tags'].items()):
            tag = get_or_create_tag(tag, Tag)
            _tiff_dump_tag(tag, taginfo, linePrefix, max, dest)
        for tag in ifd['duplicates']:
            dest.write('%s  Duplicate tag %s ignored\n' % (linePrefix, get_or_create_tag(tag, Tag)))
        try:
            dest.write('%s  Image mode: %s\n' % (linePrefix, resolve_image_mode(ifd).name))
        except MODE_ERRORS as exc:
            dest.write('%s  Image mode: none (%s)\n' % (linePrefix, exc))
        if ifd['geokeys'] is not None:
            dest.write('%s  GeoKeys: version %d.%d.%d\n' % (
                linePrefix, ifd['geokeys']['version'], ifd['geokeys']['keyRevision'],
                ifd['geokeys']['minorRevision']))
            for key, value in geokeys_to_names(ifd['geokeys']).items():
                dest.write('%s    %s: %s' % (
                    linePrefix, key, value if isinstance(value, (int, str, bytes)) else
                    ' '.join(str(v) for v in value)))
                if (key == GeoTiffGeoKey.ProjCoordTrans.name and isinstance(value, int) and
                        value in GeoTiffTransformations):
                    dest.write(' (%s)' % GeoTiffTransformations[value].name)
                dest.write('\n')


def _plain_value(value):
    if isinstance(value, (list, tuple)):
        return [_plain_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k) if not isinstance(k, int) else int(k): _plain_value(v)
                for k, v in value.items()}
    if isinstance(value, bool) or value is None or isinstance(value, (float, str, bytes)):
        return value
    if isinstance(value, int):
        return int(value)
    return repr(value)


def _plain_info(info):
    """
    Convert a tiff information dictionary to plain types with tag and GeoKey
    names so it can be serialized.

    :param info: the tiff information dictionary from read_tiff.
    :returns: a dictionary.
    """
    result = {
        'header': info['header'][:2].decode(),
        'bigEndian': info['bigEndian'],
        'size': info['size'],
        'firstifd': info['firstifd'],
        'ifds': [],
    }
    for ifd in info['ifds']:
        record = {
            'offset': ifd['offset'],
            'nextifd': ifd['nextifd'],
            'tags': {},
            'duplicates': list(ifd['duplicates']),
        }
        for tag, taginfo in ifd['tags'].items():
            record['tags'][get_or_create_tag(tag, Tag).name] = {
                'datatype': Datatype[taginfo['datatype']].name,
                'count': taginfo['count'],
                'data': _plain_value(taginfo['data']),
            }
        try:
            record['mode'] = resolve_image_mode(ifd).name
        except MODE_ERRORS as exc:
            record['mode'] = None
            record['modeError'] = str(exc)
        if ifd['geokeys'] is not None:
            record['geokeys'] = _plain_value(geokeys_to_names(ifd['geokeys']))
        result['ifds'].append(record)
    return result


class ExtendedJsonEncoder(json.JSONEncoder):
    def default(self, obj):
        return '%s:%s' % (type(obj).__name__, repr(obj))


def tiff_info(*args, **kwargs):
    """
    Alias for tiff_dump.
    """
    return tiff_dump(*args, **kwargs)


def tiff_dump(source, max=20, dest=None, outformat='text', **kwargs):
    """
    Print the tiff information.

    :param source: the source path or a list of source paths.
    :param max: the maximum number of items to display for lists in text
        output.
    :param dest: an open stream to write to.
    :param outformat: one of 'text', 'json', or 'yaml'.
    """
    dest = sys.stdout if dest is None else dest
    if isinstance(source, list):
        if outformat != 'text':
            results = {str(src): _plain_info(read_tiff(src)) for src in source}
            _write_structured(results, dest, outformat)
            return
        for src in source:
            dest.write('-- %s --\n' % src)
            tiff_dump(src, max=max, dest=dest, outformat=outformat)
        return
    info = read_tiff(source)
    if outformat != 'text':
        _write_structured(_plain_info(info), dest, outformat)
        return
    dest.write('Header: 0x%02x%02x <%s-endian> first IFD at %d\n' % (
        info['header'][0], info['header'][1],
        'big' if info['bigEndian'] else 'little', info['firstifd']))
    _tiff_dump_ifds(info['ifds'], max, dest)


def _write_structured(results, dest, outformat):
    if outformat == 'yaml':
        yaml.safe_dump(results, dest, sort_keys=False)
    else:
        json.dump(results, dest, indent=2, cls=ExtendedJsonEncoder)
        dest.write('\n')


def main(args=None):
    from . import __version__

    if args is None:
        args = sys.argv[1:]
    description = 'Decode tiff tags, IFDs, and GeoKeys.  Version %s.' % __version__
    argumentsForAllParsers = [{
        'args': ('--verbose', '-v'),
        'kwargs': dict(action='count', default=0, help='Increase output.'),
    }, {
        'args': ('--silent', '--quiet', '-q'),
        'kwargs': dict(action='count', default=0, help='Decrease output.'),
    }, {
        'args': ('--stop-on-warning', '-X'),
        'kwargs': dict(
            dest='warningIsError', action='store_true', help='Treat warnings as errors.'),
    }]
    mainParser = argparse.ArgumentParser(description=description)
    secondaryParser = argparse.ArgumentParser(description=description, add_help=False)
    subparsers = mainParser.add_subparsers(
        dest='command',
        title='subcommands',
        help='Subcommands.  See <subcommand> --help for details.')

    parserInfo = subparsers.add_parser(
        'dump',
        aliases=['info'],
        help='dump [--max MAX] [--json|--yaml] source [source ...]',
        description='Print the directories, tags, image modes, and GeoKeys of a TIFF file.')
    parserInfo.add_argument(
        'source', nargs='+', help='Source file, - for stdin.')
    parserInfo.add_argument(
        '--max', '-m', type=int, help='Maximum items to display.', default=20)
    parserInfo.add_argument(
        '--json', dest='outformat', action='store_const', const='json', default='text',
        help='Output as json.')
    parserInfo.add_argument(
        '--yaml', dest='outformat', action='store_const', const='yaml',
        help='Output as yaml.')

    for parser in (secondaryParser, parserInfo):
        for argument in argumentsForAllParsers:
            parser.add_argument(*argument['args'], **argument['kwargs'])

    # This allows argumentsForAllParsers to be either before or after the
    # command.
    secondary, notInSecondary = secondaryParser.parse_known_args(args)
    args = mainParser.parse_args(notInSecondary)
    for k, v in vars(secondary).items():
        setattr(args, k, v)
    logging.basicConfig(
        stream=sys.stderr, level=max(1, logging.WARNING - 10 * (args.verbose - args.silent)))
    logger.debug('Parsed arguments: %r', args)
    logLevelHandler = ThrowOnLevelHandler(
        level=logging.WARNING if args.warningIsError else logging.ERROR)
    try:
        logging.getLogger('tiffmeta').addHandler(logLevelHandler)
        if args.command:
            try:
                func = globals().get('tiff_' + args.command)
                func(**vars(args))
            except Exception as exc:
                if args.verbose - args.silent >= 1:
                    raise
                sys.stderr.write(str(exc).strip() + '\n')
                return 1
        else:
            mainParser.print_help(sys.stdout)
    finally:
        logging.getLogger('tiffmeta').handlers.remove(logLevelHandler)
    return 0
