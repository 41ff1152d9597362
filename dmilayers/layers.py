# Conversion between DMI sprite sheets and one-layer-per-state documents

import base64
import binascii
import io
import logging
import math
from typing import Dict, List, Tuple

import PIL.Image  # type: ignore

from dmilayers import tiling
from dmilayers.config import LayersConfig
from dmilayers.dmi import (
    DecodeError,
    DmiError,
    DmiFile,
    DmiState,
    TilingError,
)
from dmilayers.document import Document, Layer

logger = logging.getLogger(__name__)


def load_document(
    data: bytes, *, config: LayersConfig = LayersConfig()
) -> Document:
    """Splits a DMI file into a document with one layer per icon state.

    Frames keep their position in the sheet; each layer only holds the
    frames of its own state and is transparent elsewhere. The original
    bytes ride along in document metadata so save_document can rebuild
    the file with its animation structure intact.
    """

    dmi = DmiFile.from_bytes(data)
    sheet = _decode_raster(data)
    fw, fh = dmi.frame_width, dmi.frame_height
    frame_count = tiling.total_frames(dmi.states)
    logger.info(
        f"Loading {len(dmi.states)} states, {frame_count} frames"
        f" of {fw}x{fh} from {sheet.width}x{sheet.height} sheet"
    )

    doc = Document(width=sheet.width, height=sheet.height)
    doc.metadata[config.raw_data_key] = base64.b64encode(data).decode("ascii")

    state_layers: List[Layer] = []
    for state in dmi.states:
        layer = doc.new_layer(state.name)
        layer.metadata[config.state_name_key] = state.name
        state_layers.append(layer)
        logger.debug(
            f'State "{state.name}": {state.dirs} dirs x {state.frames} frames'
        )

    for slot in tiling.iter_frames(dmi.states):
        box = _frame_box(slot.frame_number, sheet.size, fw, fh)
        layer = state_layers[slot.state_index]
        layer.image.paste(sheet.crop(box), box=box[:2])

    return doc


def save_document(
    doc: Document,
    *,
    config: LayersConfig = LayersConfig(),
    synthesize: bool = False,
) -> bytes:
    """Builds DMI bytes from a document.

    Documents that came from load_document are written back into their
    original states (update mode). Anything else, or synthesize=True,
    gets one single-frame state per layer cut from a square grid.
    """

    raw_data = "" if synthesize else doc.metadata.get(config.raw_data_key)
    if raw_data:
        dmi = update_dmi(doc, raw_data, config=config)
    else:
        dmi = synthesize_dmi(doc, config=config)
    return dmi.to_bytes(compress_level=config.compress_level)


def update_dmi(
    doc: Document, raw_data: str, *, config: LayersConfig = LayersConfig()
) -> DmiFile:
    try:
        original = base64.b64decode(raw_data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Bad {config.raw_data_key} metadata") from exc

    dmi = DmiFile.from_bytes(original)
    flat = doc.render()
    fw, fh = dmi.frame_width, dmi.frame_height
    logger.info(
        f"Updating {len(dmi.states)} states"
        f" ({tiling.total_frames(dmi.states)} frames of {fw}x{fh})"
    )

    for slot in tiling.iter_frames(dmi.states):
        box = _frame_box(slot.frame_number, doc.size, fw, fh)
        slot.state.set_frame(flat.crop(box), slot.direction, slot.frame)

    rename_states(dmi, doc, config=config)
    return dmi


def rename_states(
    dmi: DmiFile, doc: Document, *, config: LayersConfig = LayersConfig()
):
    """Gives states the current names of the layers made from them.

    A layer's recorded state name claims the first state (in file order)
    that was decoded under that name and not yet claimed by an earlier
    layer. Matching always uses the decoded names, so renames don't chain.
    """

    unclaimed: Dict[str, List[DmiState]] = {}
    for state in dmi.states:
        unclaimed.setdefault(state.name, []).append(state)

    for layer in doc.layers:
        recorded = layer.metadata.get(config.state_name_key)
        if not recorded:
            continue
        candidates = unclaimed.get(recorded)
        if not candidates:
            logger.warning(
                f'Layer "{layer.name}": no state "{recorded}" left to rename'
            )
            continue
        state = candidates.pop(0)
        if state.name != layer.name:
            logger.info(f'Renaming state "{state.name}" => "{layer.name}"')
            state.name = layer.name


def synthesize_dmi(
    doc: Document, *, config: LayersConfig = LayersConfig()
) -> DmiFile:
    count = len(doc.layers)
    if not count:
        raise DmiError("No layers to save")

    per_line = math.ceil(math.sqrt(count))
    fw, fh = doc.width // per_line, doc.height // per_line
    if not fw or not fh:
        raise DmiError(
            f"Canvas {doc.width}x{doc.height} too small"
            f" for {per_line}x{per_line} grid"
        )

    lost_x, lost_y = doc.width - fw * per_line, doc.height - fh * per_line
    if (lost_x or lost_y) and config.warn_on_truncation:
        logger.warning(
            f"Canvas {doc.width}x{doc.height} doesn't divide into"
            f" {per_line}x{per_line} frames of {fw}x{fh},"
            f" dropping {lost_x}px right, {lost_y}px bottom"
        )

    logger.info(f"Building {count} single-frame states of {fw}x{fh}")
    flat = doc.render()
    dmi = DmiFile(frame_width=fw, frame_height=fh)
    for index, layer in enumerate(doc.layers):
        box = _frame_box(index, doc.size, fw, fh)
        state = DmiState(name=layer.name, width=fw, height=fh)
        state.set_frame(flat.crop(box), 0, 0)
        dmi.add_state(state)
    return dmi


def _decode_raster(data: bytes) -> PIL.Image.Image:
    try:
        with PIL.Image.open(io.BytesIO(data)) as image:
            return image.convert("RGBA")
    except (PIL.UnidentifiedImageError, OSError) as exc:
        raise DecodeError(f"Bad image data: {exc}") from exc


def _frame_box(
    frame_number: int, size: Tuple[int, int], fw: int, fh: int
) -> Tuple[int, int, int, int]:
    if size[0] < fw:
        raise TilingError(frame_number, fw, fh)
    offset = tiling.frame_offset(frame_number, size[0], size[1], fw, fh)
    box = tiling.frame_box(offset, fw, fh)
    if not tiling.box_inside(box, size):
        raise TilingError(frame_number, fw, fh)
    return box
