import logging
from importlib.metadata import PackageNotFoundError, version

from .commands import main, tiff_dump, tiff_info
from .constants import (Compression, Datatype, GeoTiffGeoKey, GeoTiffTransformations, ImageMode,
                        Photometric, Predictor, Tag, TiffDatatype, TiffTag)
from .exceptions import (InvalidFormatError, MissingReferencedTagError, MissingTagError,
                         TiffmetaError, TiffmetaException, TruncatedError,
                         UnsupportedCompressionError, UnsupportedConfigurationError,
                         UnsupportedError, UnsupportedTypeError, ValueOverflowError)
from .geotiff_utils import geokeys_to_names, parse_geokeys
from .imagemode import get_image_info, get_image_layout, resolve_image_mode
from .tiffmeta import iter_raw_blocks, read_header, read_ifd, read_tiff, resolve_tag_data

try:
    __version__ = version(__name__)
except PackageNotFoundError:
    # package is not installed
    __version__ = None


logger = logging.getLogger(__name__)

# See http://docs.python.org/3.3/howto/logging.html#configuring-logging-for-a-library
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = (
    'Compression',
    'Datatype', 'TiffDatatype',
    'GeoTiffGeoKey',
    'GeoTiffTransformations',
    'ImageMode',
    'Photometric',
    'Predictor',
    'Tag', 'TiffTag',

    'TiffmetaError',
    'TiffmetaException',
    'InvalidFormatError',
    'TruncatedError',
    'ValueOverflowError',
    'UnsupportedTypeError',
    'UnsupportedError',
    'UnsupportedCompressionError',
    'UnsupportedConfigurationError',
    'MissingTagError',
    'MissingReferencedTagError',

    'read_tiff',
    'read_header',
    'read_ifd',
    'resolve_tag_data',
    'iter_raw_blocks',
    'resolve_image_mode',
    'get_image_info',
    'get_image_layout',
    'parse_geokeys',
    'geokeys_to_names',

    'tiff_dump',
    'tiff_info',

    '__version__',
    'main',
)
