import logging

from .constants import (Compression, Datatype, ExtraSamples, ImageMode, Photometric, PlanarConfig,
                        Predictor, SampleFormat, Tag)
from .exceptions import (InvalidFormatError, MissingTagError, UnsupportedCompressionError,
                         UnsupportedConfigurationError)

logger = logging.getLogger(__name__)

GRAY_DEPTHS = (2, 4, 8, 16)
PALETTE_DEPTHS = (1, 2, 4, 8)
RGB_DEPTHS = (8, 16)


def _tag_values(ifd, tag, integer=True):
    """
    Get the values of a tag as a list, falling back to the tag's default.

    :param ifd: an ifd with resolved tag data.
    :param tag: a TiffTag.
    :param integer: if True, the values must be integers.
    :returns: a list of values or None if the tag is absent or empty and has
        no default.
    """
    taginfo = ifd['tags'].get(int(tag))
    if taginfo is not None and len(taginfo['data']):
        data = taginfo['data']
        values = data if isinstance(data, list) else [data]
        if integer and not all(isinstance(value, int) for value in values):
            raise InvalidFormatError(
                '%s must hold integers, not %s' % (
                    tag.name, Datatype[taginfo['datatype']].name),
                stage='mode', tag=int(tag))
        return values
    if 'default' in tag:
        return [int(tag.default)]
    return None


def _first_value(ifd, tag, required=False, integer=True):
    values = _tag_values(ifd, tag, integer)
    if not values:
        if required:
            raise MissingTagError('Missing required tag %s' % tag, stage='mode', tag=int(tag))
        return None
    return values[0]


def select_image_mode(photometric, bitsPerSample, samplesPerPixel, hasColorMap, extraSamples):
    """
    Map a combination of tag values to an image mode.

    :param photometric: the PhotometricInterpretation value.
    :param bitsPerSample: a list of bits per sample.
    :param samplesPerPixel: the number of samples per pixel.
    :param hasColorMap: True if the ColorMap tag is present.
    :param extraSamples: a list of ExtraSamples values or None.
    :returns: an ImageMode or None if the combination is not supported.
    """
    bits = bitsPerSample[0]
    if photometric in (Photometric.MinIsWhite, Photometric.MinIsBlack):
        if samplesPerPixel == 1 and bits == 1:
            return ImageMode.Bilevel
        if samplesPerPixel == 1 and bits in GRAY_DEPTHS:
            return ImageMode.Gray if photometric == Photometric.MinIsBlack else ImageMode.GrayInvert
    elif photometric == Photometric.Palette:
        if samplesPerPixel == 1 and hasColorMap and bits in PALETTE_DEPTHS:
            return ImageMode.Paletted
    elif photometric == Photometric.RGB:
        if bits not in RGB_DEPTHS or any(b != bits for b in bitsPerSample):
            return None
        if samplesPerPixel == 3:
            return ImageMode.RGB
        if samplesPerPixel == 4 and extraSamples:
            if extraSamples[0] == ExtraSamples.AssociatedAlpha:
                return ImageMode.RGBA
            if extraSamples[0] == ExtraSamples.UnassociatedAlpha:
                return ImageMode.NRGBA
    return None


def resolve_image_mode(ifd):
    """
    Validate the tags that describe the pixels of an IFD and determine the
    image mode.

    :param ifd: an ifd with resolved tag data.
    :returns: an ImageMode.
    """
    _first_value(ifd, Tag.ImageWidth, True)
    _first_value(ifd, Tag.ImageLength, True)
    compression = _first_value(ifd, Tag.Compression)
    if compression not in Compression:
        raise UnsupportedCompressionError(
            'Unsupported compression %s' % compression, stage='mode', tag=int(Tag.Compression))
    predictor = _first_value(ifd, Tag.Predictor)
    if predictor not in Predictor:
        raise UnsupportedConfigurationError(
            'Unsupported predictor %s' % predictor, stage='mode', tag=int(Tag.Predictor))
    bitsPerSample = _tag_values(ifd, Tag.BitsPerSample)
    if not bitsPerSample or 0 in bitsPerSample:
        raise InvalidFormatError(
            'BitsPerSample must not be 0', stage='mode', tag=int(Tag.BitsPerSample))
    samplesPerPixel = _first_value(ifd, Tag.SamplesPerPixel)
    if samplesPerPixel > 1 and _first_value(ifd, Tag.PlanarConfig) != PlanarConfig.Chunky:
        raise UnsupportedConfigurationError(
            'Unsupported planar configuration', stage='mode', tag=int(Tag.PlanarConfig))
    if any(fmt != SampleFormat.uint for fmt in _tag_values(ifd, Tag.SampleFormat)):
        raise UnsupportedConfigurationError(
            'Only unsigned integer samples are supported', stage='mode',
            tag=int(Tag.SampleFormat))
    photometric = _first_value(ifd, Tag.Photometric, True)
    mode = select_image_mode(
        photometric, bitsPerSample, samplesPerPixel,
        int(Tag.ColorMap) in ifd['tags'], _tag_values(ifd, Tag.ExtraSamples))
    if mode is None:
        raise UnsupportedConfigurationError(
            'Unsupported color model: %s with %d samples of %s bits' % (
                Photometric[photometric].name if photometric in Photometric else photometric,
                samplesPerPixel, bitsPerSample),
            stage='mode', tag=int(Tag.Photometric))
    logger.debug('Image mode of IFD at %s: %s', ifd.get('offset'), mode.name)
    return mode


def get_palette(ifd):
    """
    Convert the ColorMap of an IFD to a list of 8-bit (red, green, blue)
    tuples.  The ColorMap stores all of the 16-bit red values, then all of the
    green values, then all of the blue values.

    :param ifd: an ifd with resolved tag data.
    :returns: a list of up to 256 color tuples.
    """
    colormap = _tag_values(ifd, Tag.ColorMap)
    if colormap is None:
        raise MissingTagError('Missing ColorMap', stage='mode', tag=int(Tag.ColorMap))
    numcolors = len(colormap) // 3
    if len(colormap) % 3 or not 0 < numcolors <= 256:
        raise InvalidFormatError(
            'Bad ColorMap length %d' % len(colormap), stage='mode', tag=int(Tag.ColorMap))
    return [
        (colormap[idx] >> 8, colormap[idx + numcolors] >> 8, colormap[idx + 2 * numcolors] >> 8)
        for idx in range(numcolors)]


def get_nodata(ifd):
    """
    Get the GDAL no-data value of an IFD.

    :param ifd: an ifd with resolved tag data.
    :returns: a float or None if there is no valid no-data value.
    """
    nodata = _first_value(ifd, Tag.GDAL_NoData, integer=False)
    if nodata is None:
        return None
    try:
        return float(nodata)
    except ValueError:
        logger.warning('Cannot parse GDAL_NoData value %r', nodata)
        return None


def get_image_layout(ifd):
    """
    Determine how the image data is divided into strips or tiles.

    :param ifd: an ifd with resolved tag data.
    :returns: a dictionary with 'tiled', 'blockWidth', 'blockHeight',
        'blocksAcross', 'blocksDown', 'offsets', and 'bytecounts'.
    """
    width = _first_value(ifd, Tag.ImageWidth, True)
    height = _first_value(ifd, Tag.ImageLength, True)
    tiled = int(Tag.TileWidth) in ifd['tags']
    if tiled:
        blockWidth = _first_value(ifd, Tag.TileWidth)
        blockHeight = _first_value(ifd, Tag.TileLength, True)
        offsetsTag, bytecountsTag = Tag.TileOffsets, Tag.TileByteCounts
    else:
        blockWidth = width
        rowsPerStrip = _first_value(ifd, Tag.RowsPerStrip)
        blockHeight = height if not rowsPerStrip or rowsPerStrip > height else rowsPerStrip
        offsetsTag, bytecountsTag = Tag.StripOffsets, Tag.StripByteCounts
    if not blockWidth or not blockHeight:
        raise InvalidFormatError('Image blocks must not be empty', stage='mode')
    offsets = _tag_values(ifd, offsetsTag)
    if offsets is None:
        raise MissingTagError('Missing %s' % offsetsTag, stage='mode', tag=int(offsetsTag))
    bytecounts = _tag_values(ifd, bytecountsTag)
    if bytecounts is None:
        raise MissingTagError('Missing %s' % bytecountsTag, stage='mode', tag=int(bytecountsTag))
    blocksAcross = (width + blockWidth - 1) // blockWidth
    blocksDown = (height + blockHeight - 1) // blockHeight
    planes = 1
    if _first_value(ifd, Tag.PlanarConfig) == PlanarConfig.Planar:
        planes = _first_value(ifd, Tag.SamplesPerPixel)
    if len(offsets) != len(bytecounts) or len(offsets) != blocksAcross * blocksDown * planes:
        raise InvalidFormatError(
            'Inconsistent header: %d offsets and %d byte counts for %d blocks' % (
                len(offsets), len(bytecounts), blocksAcross * blocksDown * planes),
            stage='mode', tag=int(offsetsTag))
    return {
        'tiled': tiled,
        'blockWidth': blockWidth,
        'blockHeight': blockHeight,
        'blocksAcross': blocksAcross,
        'blocksDown': blocksDown,
        'offsets': offsets,
        'bytecounts': bytecounts,
    }


def get_image_info(ifd):
    """
    Collect what is needed to decompress and assemble the image of an IFD.
    Neither decompression nor the predictor are applied here; 'predictor' is
    True if the decompressed data must have horizontal differencing undone.

    :param ifd: an ifd with resolved tag data.
    :returns: a dictionary with 'mode', 'width', 'height', 'bitsPerSample',
        'samplesPerPixel', 'compression', 'predictor', 'inverted', 'palette',
        'nodata', and the keys from get_image_layout.
    """
    mode = resolve_image_mode(ifd)
    info = {
        'mode': mode,
        'width': _first_value(ifd, Tag.ImageWidth),
        'height': _first_value(ifd, Tag.ImageLength),
        'bitsPerSample': _tag_values(ifd, Tag.BitsPerSample),
        'samplesPerPixel': _first_value(ifd, Tag.SamplesPerPixel),
        'compression': Compression[_first_value(ifd, Tag.Compression)],
        'predictor': _first_value(ifd, Tag.Predictor) == Predictor.Horizontal,
        'inverted': _first_value(ifd, Tag.Photometric) == Photometric.MinIsWhite,
        'palette': get_palette(ifd) if mode == ImageMode.Paletted else None,
        'nodata': get_nodata(ifd),
    }
    info.update(get_image_layout(ifd))
    return info
