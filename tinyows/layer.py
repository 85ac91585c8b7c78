"""Layers served by the service and the database storage behind them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator


@dataclass
class LayerStorage:
    """Where and how a layer's features are stored in PostGIS."""

    schema: str = ""
    table: str = ""
    srid: int = -1
    geom_columns: list[str] = field(default_factory=list)
    is_geographic: bool = True
    pkey: str | None = None
    pkey_sequence: str | None = None
    pkey_default: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)
    not_null_columns: list[str] | None = None


@dataclass(eq=False)
class Layer:
    """A layer as declared in the configuration.

    ``name`` carries the namespace URI ('uri:name'), ``name_prefix`` the
    namespace prefix ('prefix:name') and ``name_no_uri`` the bare name.
    A layer without storage is an abstract grouping layer.
    """

    depth: int = 0
    parent: Layer | None = None
    title: str | None = None
    name: str | None = None
    name_prefix: str | None = None
    name_no_uri: str | None = None
    abstract: str | None = None
    keywords: list[str] | None = None
    gml_ns: list[str] | None = None
    retrievable: bool = False
    writable: bool = False
    srid: list[str] | None = None
    geobbox: Any = None
    exclude_items: list[str] | None = None
    include_items: list[str] | None = None
    pkey: str | None = None
    pkey_sequence: str | None = None
    ns_prefix: str = ""
    ns_uri: str = ""
    storage: LayerStorage | None = field(default_factory=LayerStorage)


class LayerList:
    """An ordered collection of layers with name based lookups."""

    def __init__(self, layers: Iterable[Layer] = ()) -> None:
        self._layers: list[Layer] = list(layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def __reversed__(self) -> Iterator[Layer]:
        return reversed(self._layers)

    @property
    def last(self) -> Layer | None:
        """The most recently added layer, or None when empty."""
        return self._layers[-1] if self._layers else None

    def add(self, layer: Layer) -> None:
        self._layers.append(layer)

    def get(self, name: str) -> Layer | None:
        """Return the first layer with this (URI qualified) name."""
        return next((layer for layer in self._layers if layer.name == name), None)

    def match_table(self, name: str) -> bool:
        """Tell whether the named layer is backed by a table."""
        layer = self.get(name)
        return layer is not None and layer.storage is not None

    def names_having_storage(self) -> list[str | None]:
        """Names of the concrete layers, those with a storage."""
        return [layer.name for layer in self._layers if layer.storage is not None]

    def all_retrievable(self) -> bool:
        return all(layer.retrievable for layer in self._layers)

    def is_retrievable(self, name: str) -> bool:
        layer = self.get(name)
        return layer is not None and layer.retrievable

    def all_writable(self) -> bool:
        return all(layer.writable for layer in self._layers)

    def is_writable(self, name: str) -> bool:
        layer = self.get(name)
        return layer is not None and layer.writable

    def contains(self, name: str) -> bool:
        return self.get(name) is not None

    def contains_all(self, names: Iterable[str]) -> bool:
        return all(self.contains(name) for name in names)

    def namespaces(self) -> dict[str, str]:
        """Map each namespace prefix in use to its URI; the first layer wins."""
        result: dict[str, str] = {}
        for layer in self._layers:
            if layer.ns_prefix and layer.ns_prefix not in result:
                result[layer.ns_prefix] = layer.ns_uri
        return result

    def names_by_ns_prefix(self, prefixed_names: Iterable[str], ns_prefix: str) -> list[str]:
        """Keep the prefixed layer names whose namespace prefix is ``ns_prefix``."""
        return [name for name in prefixed_names if self.ns_prefix(name) == ns_prefix]

    def ns_prefixes(self, uri_names: Iterable[str]) -> list[str]:
        """Distinct namespace prefixes used by the given layers.

        'gml' is added when one of the layers declares GML namespaces.
        """
        prefixes: list[str] = []
        for name in uri_names:
            prefixed = self.uri_to_prefix(name)
            prefix = self.ns_prefix(prefixed) if prefixed is not None else None
            if prefix is not None and prefix not in prefixes:
                prefixes.append(prefix)
            layer = self.get(name)
            if layer is not None and layer.gml_ns and "gml" not in prefixes:
                prefixes.append("gml")
        return prefixes

    def prefixes_to_uris(self, prefixed_names: Iterable[str]) -> list[str | None]:
        return [self.prefix_to_uri(name) for name in prefixed_names]

    def uri_to_prefix(self, name: str) -> str | None:
        """Turn 'uri:name' into 'prefix:name'."""
        layer = self.get(name)
        return layer.name_prefix if layer is not None else None

    def prefix_to_uri(self, prefixed_name: str) -> str | None:
        """Turn 'prefix:name' into 'uri:name'."""
        layer = self._by_prefixed_name(prefixed_name)
        return layer.name if layer is not None else None

    def ns_prefix_to_ns_uri(self, ns_prefix: str) -> str | None:
        for layer in self._layers:
            if layer.ns_prefix == ns_prefix:
                return layer.ns_uri
        return None

    def name_no_uri(self, name: str) -> str | None:
        layer = self.get(name)
        return layer.name_no_uri if layer is not None else None

    def no_uri_to_uri(self, name_no_uri: str) -> str | None:
        for layer in self._layers:
            if layer.name_no_uri == name_no_uri:
                return layer.name
        return None

    def ns_prefix(self, prefixed_name: str) -> str | None:
        """Namespace prefix of the layer called 'prefix:name'."""
        layer = self._by_prefixed_name(prefixed_name)
        return layer.ns_prefix if layer is not None else None

    def ns_uri(self, name: str) -> str | None:
        layer = self.get(name)
        return layer.ns_uri if layer is not None else None

    def _by_prefixed_name(self, prefixed_name: str) -> Layer | None:
        return next(
            (layer for layer in self._layers if layer.name_prefix == prefixed_name), None
        )