"""Built-in conversion handlers."""

from __future__ import annotations

import logging
import struct
from collections.abc import Sequence

from format_router.errors import ConversionError
from format_router.handlers.base import FileData, replace_extension
from format_router.schemas import FileFormat

logger = logging.getLogger(__name__)

_ICONDIR = struct.Struct("<HHH")
_ICONDIRENTRY_SIZE = 16
_ICON_TYPE = 1
_CURSOR_TYPE = 2
_ANI_ICON_CHUNK = b"icon"


class CursorIconHandler:
    """Rewrite Windows cursor and icon containers.

    ICO and CUR share one directory layout and differ only in the image type
    field and in the meaning of two directory entry fields (color planes and
    bit depth for icons, hotspot coordinates for cursors). Animated cursors
    (ANI) are RIFF files whose ``icon`` chunks each hold a complete cursor;
    the first frame is extracted.

    Notes
    -----
    ANI can only be read, and only into CUR. Converting ANI straight to ICO
    is refused so that routes go through CUR instead.
    """

    name = "cursor_icon"

    def __init__(self) -> None:
        self.ready = False
        self.supported_formats: list[FileFormat] | None = None

    async def init(self) -> None:
        """Declare the cursor and icon formats."""
        self.supported_formats = [
            FileFormat(
                name="Microsoft Windows ANI",
                format="ani",
                extension="ani",
                mime="application/x-navi-animation",
                category="image",
                lossless=False,
                from_=True,
                to=False,
                internal="ani",
            ),
            FileFormat(
                name="Microsoft Windows CUR",
                format="cur",
                extension="cur",
                mime="image/vnd.microsoft.cursor",
                category="image",
                lossless=False,
                from_=True,
                to=True,
                internal="cur",
            ),
            FileFormat(
                name="Microsoft Windows ICO",
                format="ico",
                extension="ico",
                mime="image/vnd.microsoft.icon",
                category="image",
                lossless=False,
                from_=True,
                to=True,
                internal="ico",
            ),
        ]
        self.ready = True

    async def do_convert(
        self,
        input_files: Sequence[FileData],
        input_format: FileFormat,
        output_format: FileFormat,
    ) -> list[FileData]:
        """Convert every input file between ANI, CUR and ICO.

        Raises
        ------
        ConversionError
            If the format pair is unsupported or an input is malformed.
        """
        source, target = input_format.internal, output_format.internal
        outputs: list[FileData] = []
        for item in input_files:
            if source == "ani" and target == "cur":
                data = _extract_first_frame(item.data)
            elif source == "ani":
                raise ConversionError(
                    f"Refusing to convert ANI directly to {target!r}; convert to CUR first."
                )
            elif source in {"cur", "ico"} and target in {"cur", "ico"}:
                data = _rewrite_directory(item.data, to_cursor=target == "cur")
            else:
                raise ConversionError(
                    f"Unsupported conversion {source!r} -> {target!r}."
                )
            outputs.append(
                FileData(name=replace_extension(item.name, output_format.extension), data=data)
            )
        logger.debug("Converted %d file(s) %s -> %s", len(outputs), source, target)
        return outputs


def _rewrite_directory(data: bytes, *, to_cursor: bool) -> bytes:
    """Switch an ICO/CUR image directory to the other container type."""
    if len(data) < _ICONDIR.size:
        raise ConversionError("Input is too short to contain an icon directory.")
    reserved, image_type, count = _ICONDIR.unpack_from(data)
    if reserved != 0 or image_type not in {_ICON_TYPE, _CURSOR_TYPE}:
        raise ConversionError("Input is not an ICO or CUR file.")
    if len(data) < _ICONDIR.size + count * _ICONDIRENTRY_SIZE:
        raise ConversionError("Icon directory is truncated.")

    out = bytearray(data)
    struct.pack_into("<H", out, 2, _CURSOR_TYPE if to_cursor else _ICON_TYPE)
    for entry in range(count):
        offset = _ICONDIR.size + entry * _ICONDIRENTRY_SIZE
        # icon: planes=1, bit depth=0 (from image); cursor: hotspot at 0,0
        struct.pack_into("<HH", out, offset + 4, 0 if to_cursor else 1, 0)
    return bytes(out)


def _extract_first_frame(data: bytes) -> bytes:
    """Return the first ``icon`` chunk of an ANI file as a CUR file."""
    if data[:4] != b"RIFF" or data[8:12] != b"ACON":
        raise ConversionError("Input is not a RIFF ACON animated cursor.")
    marker = data.find(_ANI_ICON_CHUNK, 12)
    if marker < 0 or marker + 8 > len(data):
        raise ConversionError("Animated cursor contains no icon frame.")
    (size,) = struct.unpack_from("<I", data, marker + 4)
    start = marker + 8
    frame = data[start : start + size]
    if len(frame) != size:
        raise ConversionError("Animated cursor frame is truncated.")
    return _rewrite_directory(frame, to_cursor=True)
