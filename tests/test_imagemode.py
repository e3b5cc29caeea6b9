import pytest

import tiffmeta
from tiffmeta.constants import ExtraSamples, ImageMode, Photometric
from tiffmeta.imagemode import get_nodata, get_palette, select_image_mode

from .tiffbuilder import (ASCII, DOUBLE, FLOAT, LONG, RATIONAL, SHORT, UNDEFINED, build_tiff,
                          image_entries)


def image_ifd(imageData=b'', **kwargs):
    data = build_tiff([image_entries(**kwargs)], imageData=imageData)
    return tiffmeta.read_tiff(data)['ifds'][0]


def colormap(numcolors):
    return ([idx * 256 for idx in range(numcolors)] +
            [idx * 256 + 255 for idx in range(numcolors)] +
            [0xFFFF - idx * 256 for idx in range(numcolors)])


@pytest.mark.parametrize('kwargs,mode', [
    ({'photometric': 1, 'bits': (8,)}, ImageMode.Gray),
    ({'photometric': 1, 'bits': (16,), 'stripByteCounts': (16,)}, ImageMode.Gray),
    ({'photometric': 1, 'bits': (4,)}, ImageMode.Gray),
    ({'photometric': 0, 'bits': (8,)}, ImageMode.GrayInvert),
    ({'photometric': 0, 'bits': (2,)}, ImageMode.GrayInvert),
    ({'photometric': 1, 'bits': (1,)}, ImageMode.Bilevel),
    ({'photometric': 0, 'bits': (1,)}, ImageMode.Bilevel),
    ({'photometric': 2, 'bits': (8, 8, 8), 'samples': 3}, ImageMode.RGB),
    ({'photometric': 2, 'bits': (16, 16, 16), 'samples': 3}, ImageMode.RGB),
    ({'photometric': 2, 'bits': (8, 8, 8, 8), 'samples': 4,
      'extra': [(338, SHORT, [1])]}, ImageMode.RGBA),
    ({'photometric': 2, 'bits': (8, 8, 8, 8), 'samples': 4,
      'extra': [(338, SHORT, [2])]}, ImageMode.NRGBA),
    ({'photometric': 3, 'bits': (8,), 'extra': [(320, SHORT, colormap(256))]},
     ImageMode.Paletted),
    ({'photometric': 3, 'bits': (4,), 'extra': [(320, SHORT, colormap(16))]},
     ImageMode.Paletted),
    ({'photometric': 1, 'bits': (8,), 'compression': 8,
      'extra': [(317, SHORT, [2])]}, ImageMode.Gray),
    ({'photometric': 1, 'bits': (8,), 'compression': 32946}, ImageMode.Gray),
])
def test_resolve_image_mode(kwargs, mode):
    assert tiffmeta.resolve_image_mode(image_ifd(**kwargs)) == mode


@pytest.mark.parametrize('kwargs', [
    {'photometric': 5, 'bits': (8, 8, 8, 8), 'samples': 4},
    {'photometric': 6, 'bits': (8, 8, 8), 'samples': 3},
    {'photometric': 8, 'bits': (8, 8, 8), 'samples': 3},
    {'photometric': 4, 'bits': (1,)},
    {'photometric': 9, 'bits': (8,)},
    {'photometric': 3, 'bits': (8,)},
    {'photometric': 3, 'bits': (16,), 'extra': [(320, SHORT, colormap(256))]},
    {'photometric': 2, 'bits': (8, 8, 8, 8), 'samples': 4},
    {'photometric': 2, 'bits': (8, 8, 8, 8), 'samples': 4, 'extra': [(338, SHORT, [0])]},
    {'photometric': 2, 'bits': (8, 16, 8), 'samples': 3},
    {'photometric': 2, 'bits': (4, 4, 4), 'samples': 3},
    {'photometric': 1, 'bits': (32,)},
    {'photometric': 1, 'bits': (8, 8), 'samples': 2},
])
def test_unsupported_color_model(kwargs):
    with pytest.raises(tiffmeta.UnsupportedConfigurationError) as exc:
        tiffmeta.resolve_image_mode(image_ifd(**kwargs))
    assert 'Unsupported color model' in str(exc.value)
    assert exc.value.tag == 262


def test_unsupported_is_skippable():
    with pytest.raises(tiffmeta.UnsupportedError):
        tiffmeta.resolve_image_mode(image_ifd(photometric=6, bits=(8, 8, 8), samples=3))
    with pytest.raises(tiffmeta.UnsupportedError):
        tiffmeta.resolve_image_mode(image_ifd(compression=34712))


@pytest.mark.parametrize('compression', [0, 9, 34712, 50000])
def test_unsupported_compression(compression):
    with pytest.raises(tiffmeta.UnsupportedCompressionError) as exc:
        tiffmeta.resolve_image_mode(image_ifd(compression=compression))
    assert exc.value.tag == 259
    assert exc.value.stage == 'mode'


@pytest.mark.parametrize('tag', [256, 257, 262])
def test_missing_required_tag(tag):
    with pytest.raises(tiffmeta.MissingTagError) as exc:
        tiffmeta.resolve_image_mode(image_ifd(extra=[(tag, SHORT, None)]))
    assert exc.value.tag == tag


def test_defaults_used_for_absent_tags():
    ifd = image_ifd(bits=(1,), extra=[(258, SHORT, None), (259, SHORT, None), (277, SHORT, None)])
    assert tiffmeta.resolve_image_mode(ifd) == ImageMode.Bilevel
    info = tiffmeta.get_image_info(ifd)
    assert info['bitsPerSample'] == [1]
    assert info['samplesPerPixel'] == 1
    assert info['compression'] == tiffmeta.Compression['None']


@pytest.mark.parametrize('entry', [
    (259, RATIONAL, [(1, 1)]),
    (317, RATIONAL, [(2, 1)]),
    (262, FLOAT, [1.0]),
    (258, ASCII, '8'),
    (277, DOUBLE, [1.0]),
    (256, UNDEFINED, b'\x04'),
    (338, FLOAT, [2.0]),
])
def test_mode_tags_must_be_integers(entry):
    with pytest.raises(tiffmeta.InvalidFormatError) as exc:
        tiffmeta.resolve_image_mode(image_ifd(
            photometric=2, bits=(8, 8, 8, 8), samples=4, extra=[entry]))
    assert exc.value.stage == 'mode'
    assert exc.value.tag == entry[0]
    assert 'must hold integers' in str(exc.value)


def test_layout_tags_must_be_integers():
    with pytest.raises(tiffmeta.InvalidFormatError) as exc:
        tiffmeta.get_image_layout(image_ifd(extra=[(279, FLOAT, [8.0])]))
    assert exc.value.tag == 279


def test_zero_bits_per_sample():
    with pytest.raises(tiffmeta.InvalidFormatError) as exc:
        tiffmeta.resolve_image_mode(image_ifd(bits=(0,)))
    assert 'must not be 0' in str(exc.value)
    with pytest.raises(tiffmeta.InvalidFormatError):
        tiffmeta.resolve_image_mode(image_ifd(photometric=2, samples=3, bits=(8, 0, 8)))


def test_planar_configuration():
    kwargs = {'photometric': 2, 'bits': (8, 8, 8), 'samples': 3}
    with pytest.raises(tiffmeta.UnsupportedConfigurationError) as exc:
        tiffmeta.resolve_image_mode(image_ifd(extra=[(284, SHORT, [2])], **kwargs))
    assert exc.value.tag == 284
    assert tiffmeta.resolve_image_mode(
        image_ifd(extra=[(284, SHORT, [1])], **kwargs)) == ImageMode.RGB
    # Planar with a single sample is the same as chunky
    assert tiffmeta.resolve_image_mode(
        image_ifd(extra=[(284, SHORT, [2])])) == ImageMode.Gray


@pytest.mark.parametrize('sampleFormat', [2, 3, 4])
def test_sample_format(sampleFormat):
    with pytest.raises(tiffmeta.UnsupportedConfigurationError) as exc:
        tiffmeta.resolve_image_mode(image_ifd(extra=[(339, SHORT, [sampleFormat])]))
    assert exc.value.tag == 339


def test_predictor():
    with pytest.raises(tiffmeta.UnsupportedConfigurationError) as exc:
        tiffmeta.resolve_image_mode(image_ifd(extra=[(317, SHORT, [3])]))
    assert exc.value.tag == 317
    assert tiffmeta.get_image_info(image_ifd())['predictor'] is False
    assert tiffmeta.get_image_info(
        image_ifd(compression=5, extra=[(317, SHORT, [2])]))['predictor'] is True


def test_predictor_not_applied_to_blocks():
    imageData = bytes([10, 1, 1, 1, 20, 2, 2, 2])
    data = build_tiff(
        [image_entries(compression=1, extra=[(317, SHORT, [2])])], imageData=imageData)
    ifd = tiffmeta.read_tiff(data)['ifds'][0]
    info = tiffmeta.get_image_info(ifd)
    assert info['predictor'] is True
    assert list(tiffmeta.iter_raw_blocks(data, info)) == [imageData]


def test_get_image_info():
    ifd = image_ifd(photometric=0, bits=(1,), width=20, height=3, stripByteCounts=(9,))
    info = tiffmeta.get_image_info(ifd)
    assert info['mode'] == ImageMode.Bilevel
    assert info['inverted'] is True
    assert info['width'] == 20
    assert info['height'] == 3
    assert info['compression'] == 1
    assert info['compression'].name == 'None'
    assert info['palette'] is None
    assert info['nodata'] is None
    assert info['tiled'] is False
    assert info['offsets'] == [8]
    assert info['bytecounts'] == [9]
    info = tiffmeta.get_image_info(image_ifd(photometric=1, bits=(1,)))
    assert info['inverted'] is False


def test_strip_layout():
    info = tiffmeta.get_image_layout(image_ifd(
        width=5, height=10, rowsPerStrip=4, stripOffsets=(8, 28, 48),
        stripByteCounts=(20, 20, 10)))
    assert info['tiled'] is False
    assert info['blockWidth'] == 5
    assert info['blockHeight'] == 4
    assert info['blocksAcross'] == 1
    assert info['blocksDown'] == 3
    assert info['offsets'] == [8, 28, 48]


def test_rows_per_strip_larger_than_image():
    info = tiffmeta.get_image_layout(image_ifd(height=2, rowsPerStrip=1000))
    assert info['blockHeight'] == 2
    info = tiffmeta.get_image_layout(image_ifd(height=2, extra=[(278, SHORT, None)]))
    assert info['blockHeight'] == 2
    assert info['blocksDown'] == 1


def test_tile_layout():
    ifd = image_ifd(width=32, height=20, extra=[
        (273, LONG, None),
        (279, LONG, None),
        (322, SHORT, [16]),
        (323, SHORT, [16]),
        (324, LONG, [8, 8, 8, 8]),
        (325, LONG, [256, 256, 256, 256]),
    ])
    info = tiffmeta.get_image_layout(ifd)
    assert info['tiled'] is True
    assert info['blockWidth'] == 16
    assert info['blockHeight'] == 16
    assert info['blocksAcross'] == 2
    assert info['blocksDown'] == 2
    assert info['bytecounts'] == [256] * 4


def test_inconsistent_layout():
    with pytest.raises(tiffmeta.InvalidFormatError) as exc:
        tiffmeta.get_image_layout(image_ifd(
            height=10, rowsPerStrip=4, stripOffsets=(8, 28), stripByteCounts=(20, 20)))
    assert 'Inconsistent header' in str(exc.value)
    with pytest.raises(tiffmeta.InvalidFormatError):
        tiffmeta.get_image_layout(image_ifd(stripOffsets=(8,), stripByteCounts=(4, 4)))


def test_missing_offsets():
    with pytest.raises(tiffmeta.MissingTagError) as exc:
        tiffmeta.get_image_info(image_ifd(extra=[(273, LONG, None)]))
    assert exc.value.tag == 273
    with pytest.raises(tiffmeta.MissingTagError) as exc:
        tiffmeta.get_image_info(image_ifd(extra=[(279, LONG, None)]))
    assert exc.value.tag == 279


def test_get_palette():
    ifd = image_ifd(photometric=3, bits=(2,), extra=[(320, SHORT, colormap(4))])
    palette = get_palette(ifd)
    assert palette == [(0, 0, 255), (1, 1, 254), (2, 2, 253), (3, 3, 252)]
    assert tiffmeta.get_image_info(ifd)['palette'] == palette


@pytest.mark.parametrize('values', [[1, 2], [0] * 771])
def test_get_palette_bad_length(values):
    ifd = image_ifd(photometric=3, extra=[(320, SHORT, values)])
    with pytest.raises(tiffmeta.InvalidFormatError) as exc:
        get_palette(ifd)
    assert 'Bad ColorMap length' in str(exc.value)


def test_get_palette_missing():
    with pytest.raises(tiffmeta.MissingTagError):
        get_palette(image_ifd())


@pytest.mark.parametrize('value,expected', [
    ('-9999', -9999.0),
    ('0', 0.0),
    ('nodata', None),
])
def test_get_nodata(value, expected):
    assert get_nodata(image_ifd(extra=[(42113, ASCII, value)])) == expected


def test_select_image_mode():
    assert select_image_mode(Photometric.MinIsBlack, [8], 1, False, None) == ImageMode.Gray
    assert select_image_mode(0, [16], 1, False, None) == ImageMode.GrayInvert
    assert select_image_mode(2, [8, 8, 8, 8], 4, False, [ExtraSamples.AssociatedAlpha]) == \
        ImageMode.RGBA
    assert select_image_mode(2, [8, 8, 8, 8], 4, False, [2]) == ImageMode.NRGBA
    assert select_image_mode(3, [8], 1, True, None) == ImageMode.Paletted
    assert select_image_mode(3, [8], 1, False, None) is None
    assert select_image_mode(5, [8, 8, 8, 8], 4, False, None) is None
    assert select_image_mode(1, [1], 3, False, None) is None
