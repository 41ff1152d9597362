"""Image helpers shared by the dmilayers tests."""

import io

import PIL.Image
import PIL.PngImagePlugin


def frame_color(frame_number: int):
    """A distinct opaque color for each frame number."""
    red = (40 * frame_number + 20) % 256
    green = (90 * frame_number + 50) % 256
    return (red, green, 200, 255)


def solid(size, color):
    return PIL.Image.new("RGBA", size, color)


def png_bytes(image: PIL.Image.Image, description=None) -> bytes:
    """Encode an image as PNG, optionally with a DMI description chunk."""
    info = PIL.PngImagePlugin.PngInfo()
    if description is not None:
        info.add_text("Description", description, zip=True)
    with io.BytesIO() as out:
        image.save(out, format="PNG", pnginfo=info)
        return out.getvalue()
