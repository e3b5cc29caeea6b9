class TiffmetaError(Exception):
    def __init__(self, msg='', stage=None, tag=None):
        """
        An error while decoding a tiff file.

        :param msg: the error message.
        :param stage: the decoding stage that failed: one of 'header', 'ifd',
            'value', 'mode', 'geokeys', or 'block'.
        :param tag: the integer tag (or GeoKey id) involved, if any.
        """
        super().__init__(msg)
        self.stage = stage
        self.tag = tag


class UnknownTagError(TiffmetaError):
    pass


class InvalidFormatError(TiffmetaError):
    pass


class TruncatedError(TiffmetaError):
    pass


class ValueOverflowError(TiffmetaError):
    pass


class UnsupportedTypeError(TiffmetaError):
    pass


class UnsupportedError(TiffmetaError):
    """
    The file is well formed but uses a scheme this package does not handle.
    Callers can skip the image.
    """


class UnsupportedCompressionError(UnsupportedError):
    pass


class UnsupportedConfigurationError(UnsupportedError):
    pass


class MissingTagError(TiffmetaError):
    pass


class MissingReferencedTagError(TiffmetaError):
    pass


TiffmetaException = TiffmetaError
