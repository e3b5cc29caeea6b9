# flake8: noqa: E501
# Disable flake8 line-length check (E501), it makes this file harder to read

from .exceptions import UnknownTagError


class TiffConstant(int):
    """
    An integer code read from a tiff file, such as a tag id, a datatype, or a
    compression scheme, that also knows its name.  Comparison against another
    constant checks both value and name; comparison against an int or a
    numeric string checks the value and against any other string checks the
    name, ignoring case.
    """

    def __new__(cls, value, *args, **kwargs):
        return super().__new__(cls, value)

    def __init__(self, value, constantDict):
        """
        :param value: the integer code.
        :param constantDict: the properties of the code.  'name' is used for
            display and lookups; keys such as 'datatype', 'default', 'enum', or
            'geokeyStorage' become attributes used while decoding.
        """
        self.__dict__.update(constantDict)
        self.value = value
        self.name = str(getattr(self, 'name', self.value))

    def __str__(self):
        if str(self.name) != str(self.value):
            return '%s %d (0x%X)' % (self.name, self.value, self.value)
        return '%d (0x%X)' % (self.value, self.value)

    def __getitem__(self, key):
        try:
            return getattr(self, str(key))
        except AttributeError:
            raise KeyError(key)

    def __int__(self):
        return self.value

    def __eq__(self, other):
        if isinstance(other, TiffConstant):
            return self.value == other.value and self.name == other.name
        if isinstance(other, int):
            return self.value == other
        if not isinstance(other, str):
            return False
        try:
            return self.value == int(other, 0)
        except ValueError:
            return self.name.upper() == other.upper()

    def __ne__(self, other):
        return not self.__eq__(other)

    def __contains__(self, other):
        return hasattr(self, str(other))

    def __hash__(self):
        return hash((type(self).__name__, self.value))

    def get(self, key, default=None):
        return getattr(self, str(key), default)


class TiffTag(TiffConstant):
    def isGeoKeyStorage(self):
        """
        Report if GeoKeys are expected to point into this tag for their values.

        :returns: True for the GeoKey directory and its parameter tags.
        """
        return bool(self.get('geokeyStorage'))


class TiffConstantSet:
    def __init__(self, setNameOrClass, setDict):
        """
        A lookup table of the codes that can appear in one field of a tiff
        file.  Entries are found by value (an int, a decimal or hex string, or
        another constant) or by name or alias, ignoring case, either as
        attributes or by indexing.

        :param setNameOrClass: a TiffConstant subclass for the entries, or a
            name for a new subclass that is also added to this module.
        :param setDict: integer codes mapped to the properties of each code;
            see TiffConstant.  An 'altnames' set lists aliases.
        """
        if isinstance(setNameOrClass, str):
            setClass = type(setNameOrClass, (TiffConstant,), {})
            globals()[setNameOrClass] = setClass
        else:
            setClass = setNameOrClass
        entries = {}
        names = {}
        for value, props in setDict.items():
            entry = setClass(value, props)
            entries[value] = entry
            for name in {entry.name, str(value)} | set(props.get('altnames', ())):
                names[name.upper()] = entry
        self.__dict__.update(names)
        self._entries = entries
        self._setClass = setClass

    def __contains__(self, other):
        return hasattr(self, str(other))

    def __getattr__(self, key):
        try:
            key = str(int(key, 0))
        except (ValueError, TypeError):
            pass
        try:
            return self.__dict__[key.upper()]
        except KeyError:
            raise AttributeError("'%s' object has no attribute '%s'" % (type(self).__name__, key))

    def __getitem__(self, key):
        if isinstance(key, TiffConstant):
            key = int(key)
        try:
            return getattr(self, str(key))
        except AttributeError:
            raise KeyError(key)

    def __len__(self):
        return len(self._entries)

    def get(self, key, default=None):
        if hasattr(self, str(key)):
            return getattr(self, str(key))
        return default

    def __iter__(self):
        for _k, v in sorted(self._entries.items()):
            yield v


def get_or_create_tag(key, tagSet=None, upperLimit=True, **tagOptions):
    """
    Find the tag for an id read from a directory.  Private and unregistered
    ids are common in real files, so an id that is not in the tag set yields
    an anonymous tag named by its number.

    :param key: a tag id, a numeric string, or a tag name.
    :param tagSet: the TiffConstantSet of known tags, if any.
    :param upperLimit: if True, ids of 65536 or more are rejected since tag
        ids are 16 bits in a directory entry.
    :param **tagOptions: properties for an anonymous tag.
    :returns: a TiffTag (or the entry class of tagSet).
    :raises UnknownTagError: if key is neither a known name nor a valid id.
    """
    if tagSet and key in tagSet:
        return tagSet[key]
    try:
        value = int(key, 0) if isinstance(key, str) else int(key)
    except ValueError:
        raise UnknownTagError('Unknown tag %s' % key)
    if tagSet and value in tagSet:
        return tagSet[value]
    if value < 0 or (upperLimit and value > 0xFFFF):
        raise UnknownTagError('Unknown tag %s' % key)
    return (tagSet._setClass if tagSet else TiffTag)(value, tagOptions)


# Element width in bytes of each datatype code.  Index 0 and UNDEFINED are 0,
# which means the elements are raw 1-byte units.
DATATYPE_WIDTHS = (0, 1, 1, 2, 4, 8, 1, 0, 2, 4, 8, 4, 8)

Datatype = TiffConstantSet('TiffDatatype', {
    1: {'pack': 'B', 'name': 'BYTE', 'desc': 'UINT8 - unsigned byte'},
    2: {'pack': None, 'name': 'ASCII', 'desc': 'one or more null-terminated strings'},
    3: {'pack': 'H', 'name': 'SHORT', 'desc': 'UINT16 - unsigned short'},
    4: {'pack': 'L', 'name': 'LONG', 'desc': 'UINT32 - unsigned long', 'altnames': {'DWORD'}},
    5: {'pack': 'LL', 'name': 'RATIONAL', 'desc': 'two UINT32 forming a numerator and a denominator'},
    6: {'pack': 'b', 'name': 'SBYTE', 'desc': 'INT8 - signed byte'},
    7: {'pack': None, 'name': 'UNDEFINED', 'desc': 'arbitrary binary data'},
    8: {'pack': 'h', 'name': 'SSHORT', 'desc': 'INT16 - signed short'},
    9: {'pack': 'l', 'name': 'SLONG', 'desc': 'INT32 - signed long'},
    10: {'pack': 'll', 'name': 'SRATIONAL', 'desc': 'two INT32 forming a numerator and a denominator'},
    11: {'pack': 'f', 'name': 'FLOAT', 'desc': 'binary32 - IEEE-754 single-precision float'},
    12: {'pack': 'd', 'name': 'DOUBLE', 'desc': 'binary64 - IEEE-754 double precision float'},
})
for _datatype in Datatype:
    _datatype.size = DATATYPE_WIDTHS[_datatype.value]

Compression = TiffConstantSet('TiffCompression', {
    1: {'name': 'None', 'desc': 'No compression'},
    2: {'name': 'CCITTRLE', 'altnames': {'CCITT'}, 'desc': 'CCITT Group 3 1-Dimensional Modified Huffman run-length encoding'},
    3: {'name': 'CCITT_T4', 'altnames': {'CCITTFAX3', 'G3'}, 'desc': 'CCITT Group 3 fax encoding'},
    4: {'name': 'CCITT_T6', 'altnames': {'CCITTFAX4', 'G4'}, 'desc': 'CCITT Group 4 fax encoding'},
    5: {'name': 'LZW'},
    6: {'name': 'OldJPEG', 'altnames': {'OJPEG'}, 'desc': 'Pre-version 6.0 JPEG, superseded by JPEG', 'lossy': True},
    7: {'name': 'JPEG', 'lossy': True},
    8: {'name': 'AdobeDeflate', 'altnames': {'Deflate8'}, 'desc': 'zlib compression'},
    32773: {'name': 'Packbits', 'desc': 'Macintosh RLE'},
    32946: {'name': 'Deflate', 'altnames': {'OldDeflate'}, 'desc': 'zlib compression, superseded by AdobeDeflate'},
})

Photometric = TiffConstantSet('TiffPhotometric', {
    0: {'name': 'MinIsWhite', 'altnames': {'WhiteIsZero'}, 'desc': 'Min value is white'},
    1: {'name': 'MinIsBlack', 'altnames': {'BlackIsZero'}, 'desc': 'Min value is black'},
    2: {'name': 'RGB', 'desc': 'RGB color model'},
    3: {'name': 'Palette', 'altnames': {'Paletted'}, 'desc': 'Indexed color map'},
    4: {'name': 'Mask', 'altnames': {'TransparencyMask'}, 'desc': 'Transparency mask'},
    5: {'name': 'Separated', 'altnames': {'CMYK'}, 'desc': 'Color separations'},
    6: {'name': 'YCbCr', 'desc': 'CCIR 601'},
    8: {'name': 'CIELab', 'desc': '1976 CIE L*a*b*'},
})

PlanarConfig = TiffConstantSet('PlanarConfig', {
    1: {'name': 'Chunky', 'altnames': {'Contig'}, 'desc': 'The component values for each pixel are stored contiguously'},
    2: {'name': 'Planar', 'altnames': {'Separate'}, 'desc': 'The components are stored in separate component planes'},
})

ResolutionUnit = TiffConstantSet('ResolutionUnit', {
    1: {'name': 'None', 'desc': 'No absolute unit of measurement'},
    2: {'name': 'Inch', 'altnames': {'PerInch'}, 'desc': 'Dots per inch'},
    3: {'name': 'Centimeter', 'altnames': {'PerCM'}, 'desc': 'Dots per centimeter'},
})

Predictor = TiffConstantSet('Predictor', {
    1: {'name': 'None', 'desc': 'No predictor'},
    2: {'name': 'Horizontal', 'desc': 'Horizontal differencing'},
})

ExtraSamples = TiffConstantSet('ExtraSamples', {
    0: {'name': 'Unspecified'},
    1: {'name': 'AssociatedAlpha', 'altnames': {'AssocAlpha', 'Premultiplied'}},
    2: {'name': 'UnassociatedAlpha', 'altnames': {'UnassAlpha', 'Straight'}},
})

SampleFormat = TiffConstantSet('SampleFormat', {
    1: {'name': 'uint', 'altnames': {'UnsignedInteger'}},
    2: {'name': 'int'},
    3: {'name': 'float', 'altnames': {'IEEEFP'}},
    4: {'name': 'Undefined'},
})

ImageMode = TiffConstantSet('TiffImageMode', {
    0: {'name': 'Bilevel', 'desc': 'One bit per pixel, black and white'},
    1: {'name': 'Paletted', 'desc': 'Indices into a color map'},
    2: {'name': 'Gray', 'desc': 'Single channel, min value is black'},
    3: {'name': 'GrayInvert', 'altnames': {'GrayInverted'}, 'desc': 'Single channel, min value is white'},
    4: {'name': 'RGB'},
    5: {'name': 'RGBA', 'desc': 'RGB with premultiplied alpha'},
    6: {'name': 'NRGBA', 'altnames': {'RGBAStraight'}, 'desc': 'RGB with straight (unassociated) alpha'},
})

Tag = TiffConstantSet(TiffTag, {
    254: {'name': 'NewSubfileType', 'altnames': {'SubfileType'}, 'datatype': Datatype.LONG, 'count': 1, 'desc': 'A general indication of the kind of data contained in this subfile', 'default': 0},
    256: {'name': 'ImageWidth', 'datatype': (Datatype.SHORT, Datatype.LONG), 'count': 1, 'desc': 'The number of columns in the image'},
    257: {'name': 'ImageLength', 'altnames': {'ImageHeight'}, 'datatype': (Datatype.SHORT, Datatype.LONG), 'count': 1, 'desc': 'The number of rows in the image'},
    258: {'name': 'BitsPerSample', 'datatype': Datatype.SHORT, 'desc': 'Number of bits per component', 'default': 1},
    259: {'name': 'Compression', 'datatype': Datatype.SHORT, 'count': 1, 'enum': Compression, 'desc': 'Compression scheme used on the image data', 'default': 1},
    262: {'name': 'Photometric', 'altnames': {'PhotometricInterpretation'}, 'datatype': Datatype.SHORT, 'count': 1, 'enum': Photometric, 'desc': 'The color space of the image data'},
    266: {'name': 'FillOrder', 'datatype': Datatype.SHORT, 'count': 1, 'desc': 'The logical order of bits within a byte'},
    269: {'name': 'DocumentName', 'datatype': Datatype.ASCII},
    270: {'name': 'ImageDescription', 'datatype': Datatype.ASCII, 'desc': 'A string that describes the subject of the image'},
    271: {'name': 'Make', 'datatype': Datatype.ASCII},
    272: {'name': 'Model', 'datatype': Datatype.ASCII},
    273: {'name': 'StripOffsets', 'datatype': (Datatype.SHORT, Datatype.LONG), 'bytecounts': 'StripByteCounts', 'desc': 'The byte offset of each strip'},
    274: {'name': 'Orientation', 'datatype': Datatype.SHORT, 'count': 1, 'default': 1},
    277: {'name': 'SamplesPerPixel', 'datatype': Datatype.SHORT, 'count': 1, 'desc': 'The number of components per pixel', 'default': 1},
    278: {'name': 'RowsPerStrip', 'datatype': (Datatype.SHORT, Datatype.LONG), 'count': 1},
    279: {'name': 'StripByteCounts', 'datatype': (Datatype.SHORT, Datatype.LONG), 'desc': 'For each strip, the number of bytes in the strip after compression'},
    280: {'name': 'MinSampleValue', 'datatype': Datatype.SHORT},
    281: {'name': 'MaxSampleValue', 'datatype': Datatype.SHORT},
    282: {'name': 'XResolution', 'datatype': Datatype.RATIONAL, 'count': 1},
    283: {'name': 'YResolution', 'datatype': Datatype.RATIONAL, 'count': 1},
    284: {'name': 'PlanarConfig', 'altnames': {'PlanarConfiguration'}, 'datatype': Datatype.SHORT, 'count': 1, 'enum': PlanarConfig, 'default': 1},
    285: {'name': 'PageName', 'datatype': Datatype.ASCII},
    286: {'name': 'XPosition', 'datatype': Datatype.RATIONAL, 'count': 1},
    287: {'name': 'YPosition', 'datatype': Datatype.RATIONAL, 'count': 1},
    296: {'name': 'ResolutionUnit', 'datatype': Datatype.SHORT, 'count': 1, 'enum': ResolutionUnit, 'default': 2},
    297: {'name': 'PageNumber', 'datatype': Datatype.SHORT, 'count': 2},
    305: {'name': 'Software', 'datatype': Datatype.ASCII},
    306: {'name': 'DateTime', 'datatype': Datatype.ASCII, 'count': 20},
    315: {'name': 'Artist', 'datatype': Datatype.ASCII},
    316: {'name': 'HostComputer', 'datatype': Datatype.ASCII},
    317: {'name': 'Predictor', 'datatype': Datatype.SHORT, 'count': 1, 'enum': Predictor, 'desc': 'A predictor applied before encoding', 'default': 1},
    320: {'name': 'ColorMap', 'datatype': Datatype.SHORT, 'desc': 'A Red-Green-Blue color map for palette color images'},
    322: {'name': 'TileWidth', 'datatype': (Datatype.SHORT, Datatype.LONG), 'desc': 'The tile width in pixels'},
    323: {'name': 'TileLength', 'altnames': {'TileHeight'}, 'datatype': (Datatype.SHORT, Datatype.LONG), 'desc': 'The tile length (height) in pixels'},
    324: {'name': 'TileOffsets', 'datatype': Datatype.LONG, 'bytecounts': 'TileByteCounts', 'desc': 'For each tile, the byte offset of that tile'},
    325: {'name': 'TileByteCounts', 'datatype': (Datatype.SHORT, Datatype.LONG), 'desc': 'For each tile, the number of (compressed) bytes in that tile'},
    338: {'name': 'ExtraSamples', 'datatype': Datatype.SHORT, 'enum': ExtraSamples},
    339: {'name': 'SampleFormat', 'datatype': Datatype.SHORT, 'enum': SampleFormat, 'desc': 'How to interpret each data sample in a pixel', 'default': 1},
    33432: {'name': 'Copyright', 'datatype': Datatype.ASCII},
    # GeoTIFF tags
    33550: {'name': 'ModelPixelScaleTag', 'altnames': {'ModelPixelScale'}, 'datatype': Datatype.DOUBLE, 'count': 3},
    33922: {'name': 'ModelTiepointTag', 'altnames': {'ModelTiepoint'}, 'datatype': Datatype.DOUBLE},
    34264: {'name': 'ModelTransformationTag', 'altnames': {'ModelTransformation'}, 'datatype': Datatype.DOUBLE, 'count': 16},
    34735: {'name': 'GeoKeyDirectoryTag', 'altnames': {'GeoKeyDirectory'}, 'datatype': Datatype.SHORT, 'geokeyStorage': True},
    34736: {'name': 'GeoDoubleParamsTag', 'altnames': {'GeoDoubleParams'}, 'datatype': Datatype.DOUBLE, 'geokeyStorage': True},
    34737: {'name': 'GeoAsciiParamsTag', 'altnames': {'GeoAsciiParams'}, 'datatype': Datatype.ASCII, 'geokeyStorage': True},
    # GDAL tags
    42112: {'name': 'GDAL_Metadata', 'datatype': Datatype.ASCII, 'source': 'gdal'},
    42113: {'name': 'GDAL_NoData', 'datatype': Datatype.ASCII, 'source': 'gdal'},
})


def _geokeys(keys):
    return {key: {'name': name, 'altnames': {name + 'GeoKey'}, 'datatype': datatype}
            for key, (name, datatype) in keys.items()}


# These aren't tiff tags; these are GeoTIFF GeoKey ids.  The datatype is how
# the value is normally stored: SHORT inline, DOUBLE or ASCII in the
# GeoDoubleParamsTag or GeoAsciiParamsTag.
GeoTiffGeoKey = TiffConstantSet(TiffTag, _geokeys({
    # Configuration keys
    1024: ('GTModelType', Datatype.SHORT),
    1025: ('GTRasterType', Datatype.SHORT),
    1026: ('GTCitation', Datatype.ASCII),
    # Geographic CS parameter keys
    2048: ('GeographicType', Datatype.SHORT),
    2049: ('GeogCitation', Datatype.ASCII),
    2050: ('GeogGeodeticDatum', Datatype.SHORT),
    2051: ('GeogPrimeMeridian', Datatype.SHORT),
    2052: ('GeogLinearUnits', Datatype.SHORT),
    2053: ('GeogLinearUnitSize', Datatype.DOUBLE),
    2054: ('GeogAngularUnits', Datatype.SHORT),
    2055: ('GeogAngularUnitSize', Datatype.DOUBLE),
    2056: ('GeogEllipsoid', Datatype.SHORT),
    2057: ('GeogSemiMajorAxis', Datatype.DOUBLE),
    2058: ('GeogSemiMinorAxis', Datatype.DOUBLE),
    2059: ('GeogInvFlattening', Datatype.DOUBLE),
    2060: ('GeogAzimuthUnits', Datatype.SHORT),
    2061: ('GeogPrimeMeridianLong', Datatype.DOUBLE),
    2062: ('GeogTOWGS84', Datatype.DOUBLE),
    # Projected CS parameter keys
    3072: ('ProjectedCSType', Datatype.SHORT),
    3073: ('PCSCitation', Datatype.ASCII),
    3074: ('Projection', Datatype.SHORT),
    3075: ('ProjCoordTrans', Datatype.SHORT),
    3076: ('ProjLinearUnits', Datatype.SHORT),
    3077: ('ProjLinearUnitSize', Datatype.DOUBLE),
    3078: ('ProjStdParallel1', Datatype.DOUBLE),
    3079: ('ProjStdParallel2', Datatype.DOUBLE),
    3080: ('ProjNatOriginLong', Datatype.DOUBLE),
    3081: ('ProjNatOriginLat', Datatype.DOUBLE),
    3082: ('ProjFalseEasting', Datatype.DOUBLE),
    3083: ('ProjFalseNorthing', Datatype.DOUBLE),
    3084: ('ProjFalseOriginLong', Datatype.DOUBLE),
    3085: ('ProjFalseOriginLat', Datatype.DOUBLE),
    3086: ('ProjFalseOriginEasting', Datatype.DOUBLE),
    3087: ('ProjFalseOriginNorthing', Datatype.DOUBLE),
    3088: ('ProjCenterLong', Datatype.DOUBLE),
    3089: ('ProjCenterLat', Datatype.DOUBLE),
    3090: ('ProjCenterEasting', Datatype.DOUBLE),
    3091: ('ProjCenterNorthing', Datatype.DOUBLE),
    3092: ('ProjScaleAtNatOrigin', Datatype.DOUBLE),
    3093: ('ProjScaleAtCenter', Datatype.DOUBLE),
    3094: ('ProjAzimuthAngle', Datatype.DOUBLE),
    3095: ('ProjStraightVertPoleLong', Datatype.DOUBLE),
}))


def _transformations(names):
    return {code: {'name': 'CT_' + name, 'altnames': {name}}
            for code, name in enumerate(names, 1)}


GeoTiffTransformations = TiffConstantSet('GeoTiffTransformations', _transformations([
    'TransverseMercator',
    'TransvMercator_Modified_Alaska',
    'ObliqueMercator',
    'ObliqueMercator_Laborde',
    'ObliqueMercator_Rosenmund',
    'ObliqueMercator_Spherical',
    'Mercator',
    'LambertConfConic_2SP',
    'LambertConfConic_Helmert',
    'LambertAzimEqualArea',
    'AlbersEqualArea',
    'AzimuthalEquidistant',
    'EquidistantConic',
    'Stereographic',
    'PolarStereographic',
    'ObliqueStereographic',
    'Equirectangular',
    'CassiniSoldner',
    'Gnomonic',
    'MillerCylindrical',
    'Orthographic',
    'Polyconic',
    'Robinson',
    'Sinusoidal',
    'VanDerGrinten',
    'NewZealandMapGrid',
    'TransvMercator_SouthOriented',
]))
