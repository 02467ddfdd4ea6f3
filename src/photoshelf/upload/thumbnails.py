import io
import logging
from collections.abc import Callable
from contextlib import ExitStack
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from photoshelf.schemas.upload import ThumbnailResult
from photoshelf.upload.config import UploadSettings

logger = logging.getLogger(__name__)

# mime type -> Pillow format used for both decoding and encoding
DECODER_FORMATS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
}

_TRANSPARENT_FORMATS = {"PNG", "GIF"}
_GIF_TRANSPARENCY_INDEX = 255


def thumbnail_dimensions(width: int, height: int, max_size: int, allow_upscale: bool = True) -> tuple[int, int]:
    """Scale ``width`` x ``height`` to fit a ``max_size`` square, keeping the aspect ratio.

    Images smaller than the box are enlarged unless ``allow_upscale`` is False.
    Each side is rounded half-up and is at least 1 px.
    """
    factor = min(max_size / width, max_size / height)
    if not allow_upscale:
        factor = min(factor, 1.0)
    return max(1, int(width * factor + 0.5)), max(1, int(height * factor + 0.5))


class ThumbnailGenerator:
    """Produces bounded-size previews encoded in the source image's format."""

    def __init__(self, settings: UploadSettings):
        self.settings = settings

    def generate(self, source_path: Path | str, mime_type: str) -> ThumbnailResult:
        image_format = DECODER_FORMATS.get(mime_type)
        if image_format is None:
            return ThumbnailResult.failed("Unsupported image type")

        try:
            source = Image.open(source_path, formats=[image_format])
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
            logger.warning(f"Failed to load {source_path} as {image_format}: {e}")
            return ThumbnailResult.failed("Failed to load source image")

        with source:
            try:
                source.load()
                # camera rotation lives in EXIF, the pixels are stored unrotated
                oriented = ImageOps.exif_transpose(source)
            except Exception as e:
                # damaged data also surfaces as SyntaxError or EOFError from Pillow's decoders
                logger.warning(f"Failed to decode {source_path} as {image_format}: {e}")
                return ThumbnailResult.failed("Failed to load source image")

        with oriented:
            width, height = thumbnail_dimensions(
                oriented.width,
                oriented.height,
                self.settings.thumbnail_max_size,
                self.settings.thumbnail_allow_upscale,
            )
            try:
                data = self._render(oriented, image_format, (width, height))
            except Exception as e:
                logger.error(f"Failed to encode thumbnail for {source_path}: {e}")
                return ThumbnailResult.failed("Failed to save thumbnail")

        return ThumbnailResult(success=True, data=data, width=width, height=height)

    def _render(self, source: Image.Image, image_format: str, size: tuple[int, int]) -> bytes:
        with ExitStack() as stack:

            def track(image: Image.Image) -> Image.Image:
                stack.callback(image.close)
                return image

            if image_format in _TRANSPARENT_FORMATS:
                resized = track(track(source.convert("RGBA")).resize(size, Image.Resampling.BILINEAR))
                canvas = track(Image.new("RGBA", size, (0, 0, 0, 0)))
                canvas.alpha_composite(resized)
                if image_format == "GIF":
                    return self._encode_gif(canvas, track)
                return self._encode(canvas, image_format)

            mode = source.mode
            if image_format == "JPEG" and mode not in {"L", "RGB", "CMYK"}:
                mode = "RGB"
            elif image_format == "WEBP" and mode not in {"RGB", "RGBA"}:
                mode = "RGBA" if source.has_transparency_data else "RGB"

            resized = track(track(source.convert(mode)).resize(size, Image.Resampling.BILINEAR))
            return self._encode(resized, image_format)

    def _encode(self, image: Image.Image, image_format: str) -> bytes:
        buffer = io.BytesIO()
        if image_format == "JPEG":
            image.save(buffer, format="JPEG", quality=self.settings.jpeg_quality)
        elif image_format == "PNG":
            image.save(buffer, format="PNG", compress_level=self.settings.png_compress_level)
        elif image_format == "WEBP":
            image.save(buffer, format="WEBP", quality=self.settings.webp_quality)
        else:
            raise ValueError(f"No encoder for {image_format}")
        return buffer.getvalue()

    def _encode_gif(self, canvas: Image.Image, track: Callable[[Image.Image], Image.Image]) -> bytes:
        # 255 palette colours for the picture, the last index is reserved for transparency
        alpha = track(canvas.getchannel("A"))
        paletted = track(track(canvas.convert("RGB")).quantize(colors=255))
        palette = (paletted.getpalette() or [])[: 255 * 3]
        palette += [0] * (256 * 3 - len(palette))
        paletted.putpalette(palette)
        mask = track(alpha.point(lambda value: 255 if value < 128 else 0))
        paletted.paste(_GIF_TRANSPARENCY_INDEX, mask=mask)

        buffer = io.BytesIO()
        paletted.save(buffer, format="GIF", transparency=_GIF_TRANSPARENCY_INDEX, optimize=False)
        return buffer.getvalue()
