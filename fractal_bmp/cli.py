"""Command-line driver: parse options, render, write the image."""

from __future__ import annotations

import io
import logging
import time
from argparse import ArgumentParser, ArgumentTypeError
from pathlib import Path

import PIL.Image

from .complex_value import ComplexValue
from .errors import ConfigurationError
from .fractals import DEFAULT_MAX_ITERATIONS, PRECISIONS, Fractal, Julia, Mandelbrot, Newton
from .renderer import RenderParameters, render_bitmap, render_to_file

logger = logging.getLogger(__name__)

DEFAULT_SEED = "0.2-0.17j"
DEFAULT_ROOTS = ("1+1j", "-1+1j", "-1-1j", "1-1j")


def parse_complex(text: str) -> ComplexValue:
    """Parse ``'0.3+0.5j'``, ``'-0.4-0.6j'``, ``'0.3,0.5'`` or a plain real."""

    s = text.strip().lower().replace(" ", "")
    try:
        if "," in s:
            real, imag = s.split(",")
            return ComplexValue.of(float(real), float(imag))
        value = complex(s.replace("i", "j"))
    except ValueError as exc:
        raise ArgumentTypeError(f"invalid complex number '{text}'") from exc
    return ComplexValue.of(value.real, value.imag)


def build_parser():
    parser = ArgumentParser(description="Render a Mandelbrot, Julia or Newton fractal to a bitmap.")

    parser.add_argument('--width', type=int, dest='width', metavar='WIDTH', default=400,
                        help='image width in pixels')
    parser.add_argument('--height', type=int, dest='height', metavar='HEIGHT', default=400,
                        help='image height in pixels')

    parser.add_argument('--real-range', type=float, nargs=2, dest='real_range', metavar=('START', 'END'),
                        default=[-2.0, 2.0], help='real interval sampled from left to right')
    parser.add_argument('--imag-range', type=float, nargs=2, dest='imag_range', metavar=('START', 'END'),
                        default=[-2.0, 2.0], help='imaginary interval sampled from bottom to top')

    parser.add_argument('--max-iterations', type=int, dest='max_iterations', metavar='MAX_ITERATIONS',
                        default=DEFAULT_MAX_ITERATIONS,
                        help='escape-time iteration cap, or the number of Newton steps')

    parser.add_argument('--fractal', choices=['mandelbrot', 'julia', 'newton'], default='mandelbrot',
                        help='which fractal to render')
    parser.add_argument('--seed', type=parse_complex, dest='seed', metavar='COMPLEX', default=None,
                        help=f'additive constant of a Julia set (default {DEFAULT_SEED})')
    parser.add_argument('--root', type=parse_complex, dest='roots', action='append', metavar='COMPLEX',
                        help='root of the Newton polynomial. May be repeated. Default: the four roots ±1±1j.')

    parser.add_argument('--precision', choices=sorted(PRECISIONS), default='single',
                        help='floating-point precision of the iteration')

    parser.add_argument('--output', type=str, dest='output', metavar='PATH', default='fractal.bmp',
                        help='destination file')
    parser.add_argument('--format', type=str, dest='format', metavar='FORMAT', default='bmp',
                        help='file format. "bmp" is written directly; anything else Pillow can save is converted.')

    parser.add_argument('--per-pixel', dest='per_pixel', action='store_true',
                        help='evaluate every pixel through the scalar pipeline instead of the vectorized one')
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')

    return parser


def build_fractal(opt) -> Fractal:
    if opt.fractal == 'mandelbrot':
        spec = Mandelbrot()
    elif opt.fractal == 'julia':
        spec = Julia(opt.seed if opt.seed is not None else parse_complex(DEFAULT_SEED))
    else:
        roots = opt.roots if opt.roots else [parse_complex(root) for root in DEFAULT_ROOTS]
        spec = Newton(roots)
    return Fractal(spec, max_iterations=opt.max_iterations, precision=opt.precision)


def build_parameters(opt) -> RenderParameters:
    return RenderParameters(
        width=opt.width,
        height=opt.height,
        real_range=tuple(opt.real_range),
        imag_range=tuple(opt.imag_range),
        fractal=build_fractal(opt),
    )


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def resolve_output_path(opt, parser: ArgumentParser) -> tuple[Path, str]:
    image_format = (opt.format or "bmp").lower().lstrip(".") or "bmp"
    output_path = Path(opt.output).expanduser()
    if output_path.exists() and output_path.is_dir():
        parser.error("--output must point to a file, not a directory.")
    expected_suffix = f".{image_format}"
    if output_path.suffix:
        if output_path.suffix.lower() != expected_suffix:
            parser.error(f"--output extension {output_path.suffix} does not match --format {image_format}.")
    else:
        output_path = output_path.with_suffix(expected_suffix)
    return output_path, image_format


def write_converted(data: bytes, output_path: Path, image_format: str) -> None:
    """Re-encode bitmap bytes into another Pillow format."""

    with PIL.Image.open(io.BytesIO(data)) as image:
        image.save(str(output_path), format=_pil_format_name(image_format))


def main(argv=None) -> int:
    parser = build_parser()
    opt = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if opt.verbose else logging.INFO, format='%(message)s')

    try:
        params = build_parameters(opt)
    except ConfigurationError as exc:
        parser.error(str(exc))
    output_path, image_format = resolve_output_path(opt, parser)

    logger.debug("Fractal: %s", params.fractal)
    start = time.perf_counter()
    if image_format == "bmp":
        render_to_file(params, output_path, per_pixel=opt.per_pixel)
    else:
        write_converted(render_bitmap(params, per_pixel=opt.per_pixel), output_path, image_format)
    logger.info("Wrote %s in %.3f seconds", output_path, time.perf_counter() - start)
    return 0
