import io
import uuid
from datetime import UTC, datetime, timedelta

import jwt
from PIL import Image

from photoshelf.schemas.upload import UploadCandidate

JWT_SECRET = "supersecretkey"

_PIL_FORMATS = {"jpg": "JPEG", "jpeg": "JPEG", "png": "PNG", "gif": "GIF", "webp": "WEBP"}


def make_image_bytes(fmt: str = "jpg", size: tuple[int, int] = (640, 480), transparent: bool = False) -> bytes:
    """Render a small test image. Transparent images have a clear border around an opaque block."""
    pil_format = _PIL_FORMATS[fmt.lower()]
    if transparent:
        image = Image.new("RGBA", size, (0, 0, 0, 0))
        w, h = size
        image.paste((200, 30, 30, 255), (w // 4, h // 4, 3 * w // 4, 3 * h // 4))
    else:
        image = Image.new("RGB", size, (30, 120, 200))

    buffer = io.BytesIO()
    if pil_format == "JPEG":
        image.convert("RGB").save(buffer, format="JPEG", quality=90)
    elif pil_format == "GIF" and transparent:
        paletted = image.convert("RGB").quantize(colors=255)
        palette = (paletted.getpalette() or [])[: 255 * 3]
        palette += [0] * (256 * 3 - len(palette))
        paletted.putpalette(palette)
        mask = image.getchannel("A").point(lambda value: 255 if value < 128 else 0)
        paletted.paste(255, mask=mask)
        paletted.save(buffer, format="GIF", transparency=255, optimize=False)
    else:
        image.save(buffer, format=pil_format)
    return buffer.getvalue()


def make_candidate(filename: str = "photo.jpg", data: bytes | None = None, error: str | None = None, size: int | None = None) -> UploadCandidate:
    if data is None:
        data = make_image_bytes(filename.rsplit(".", 1)[-1] if "." in filename else "jpg")
    return UploadCandidate(
        filename=filename,
        content_type="application/octet-stream",
        size=len(data) if size is None else size,
        data=data,
        error=error,
    )


def make_token(user_id: uuid.UUID | str, expires_in: timedelta = timedelta(minutes=30), secret: str = JWT_SECRET) -> str:
    payload = {"sub": str(user_id), "exp": datetime.now(UTC) + expires_in}
    return jwt.encode(payload, secret, algorithm="HS256")


def stored_files(directory) -> list[str]:
    return sorted(path.name for path in directory.iterdir() if path.is_file())


def multipart_files(*named: tuple[str, bytes]) -> list[tuple[str, tuple[str, bytes, str]]]:
    """Build the ``files=`` argument of a TestClient request for the ``files`` form field."""
    return [("files", (name, data, "application/octet-stream")) for name, data in named]
