# Layered editing document, saved as a directory of PNG layers + TOML manifest

import logging
import re
from pathlib import Path
from typing import Dict, List, Union

import attr
import cattr
import cattr.errors
import cattr.preconf.tomlkit
import PIL.Image  # type: ignore
import tomlkit
import tomlkit.exceptions

logger = logging.getLogger(__name__)

MANIFEST_NAME = "document.toml"


class DocumentError(Exception):
    pass


@attr.define
class Layer:
    name: str
    image: PIL.Image.Image = attr.ib(repr=False, eq=False)
    visible: bool = True
    opacity: int = 255
    metadata: Dict[str, str] = attr.Factory(dict)


@attr.define
class Document:
    width: int
    height: int
    layers: List[Layer] = attr.Factory(list)
    metadata: Dict[str, str] = attr.Factory(dict)

    @property
    def size(self):
        return (self.width, self.height)

    def new_layer(self, name: str) -> Layer:
        layer = Layer(name=name, image=PIL.Image.new("RGBA", self.size))
        self.layers.append(layer)
        return layer

    def render(self) -> PIL.Image.Image:
        """Composites visible layers, first layer at the bottom."""

        flat = PIL.Image.new("RGBA", self.size)
        for layer in self.layers:
            if not layer.visible or layer.opacity <= 0:
                continue
            if layer.image.size != self.size:
                raise DocumentError(
                    f'Layer "{layer.name}" is {layer.image.size},'
                    f" document is {self.size}"
                )
            image = layer.image.convert("RGBA")
            if layer.opacity < 255:
                opacity = layer.opacity
                alpha = image.getchannel("A").point(
                    lambda a: a * opacity // 255
                )
                image.putalpha(alpha)
            flat.alpha_composite(image)
        return flat


@attr.define
class _LayerEntry:
    name: str
    file: str
    visible: bool = True
    opacity: int = 255
    metadata: Dict[str, str] = attr.Factory(dict)


@attr.define
class _Manifest:
    width: int
    height: int
    metadata: Dict[str, str] = attr.Factory(dict)
    layers: List[_LayerEntry] = attr.Factory(list)


_toml_converter = cattr.preconf.tomlkit.make_converter()


def write_document(doc: Document, path: Union[str, Path]):
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)

    manifest = _Manifest(
        width=doc.width, height=doc.height, metadata=dict(doc.metadata)
    )
    for index, layer in enumerate(doc.layers):
        file_name = f"{index:02d}-{_file_safe(layer.name)}.png"
        logger.debug(f"Writing layer: {dir_path / file_name}")
        layer.image.save(dir_path / file_name, format="PNG")
        manifest.layers.append(
            _LayerEntry(
                name=layer.name,
                file=file_name,
                visible=layer.visible,
                opacity=layer.opacity,
                metadata=dict(layer.metadata),
            )
        )

    with (dir_path / MANIFEST_NAME).open("w") as file:
        tomlkit.dump(_toml_converter.unstructure(manifest), file)


def read_document(path: Union[str, Path]) -> Document:
    dir_path = Path(path)
    try:
        with (dir_path / MANIFEST_NAME).open() as file:
            toml_data = tomlkit.load(file)
        manifest = _toml_converter.structure(toml_data.unwrap(), _Manifest)
    except FileNotFoundError as exc:
        raise DocumentError(f"No {MANIFEST_NAME} in {dir_path}") from exc
    except (
        tomlkit.exceptions.TOMLKitError,
        cattr.errors.BaseValidationError,
    ) as exc:
        raise DocumentError(f"Bad {dir_path / MANIFEST_NAME}: {exc}") from exc

    doc = Document(
        width=manifest.width,
        height=manifest.height,
        metadata=manifest.metadata,
    )
    for entry in manifest.layers:
        image_path = dir_path / entry.file
        logger.debug(f"Reading layer: {image_path}")
        try:
            with PIL.Image.open(image_path) as image:
                layer_image = image.convert("RGBA")
        except OSError as exc:
            raise DocumentError(f"Bad layer image ({image_path})") from exc

        if layer_image.size != doc.size:
            raise DocumentError(
                f"Layer image {image_path} is {layer_image.size},"
                f" document is {doc.size}"
            )

        doc.layers.append(
            Layer(
                name=entry.name,
                image=layer_image,
                visible=entry.visible,
                opacity=entry.opacity,
                metadata=entry.metadata,
            )
        )

    return doc


def _file_safe(name: str) -> str:
    return re.sub(r"[^\w.-]+", "_", name).strip("._") or "layer"
