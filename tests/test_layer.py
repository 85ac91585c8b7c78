import pytest

from tinyows.layer import Layer, LayerList, LayerStorage


def make_layer(bare, prefix="tows", uri="http://www.example.com/tinyows", **kwargs):
    return Layer(
        name=f"{uri}:{bare}",
        name_prefix=f"{prefix}:{bare}",
        name_no_uri=bare,
        title=bare,
        ns_prefix=prefix,
        ns_uri=uri,
        **kwargs,
    )


URI_A = "http://www.example.com/a"
URI_B = "http://www.example.com/b"


@pytest.fixture
def layers():
    roads = make_layer("roads", "a", URI_A, retrievable=True, writable=True)
    rivers = make_layer("rivers", "a", URI_A, retrievable=True, gml_ns=["gml"])
    towns = make_layer("towns", "b", URI_B, retrievable=True, writable=True)
    group = Layer(title="group", storage=None)
    return LayerList([group, roads, rivers, towns])


def test_storage_defaults():
    storage = LayerStorage()
    assert storage.srid == -1
    assert storage.is_geographic is True
    assert storage.geom_columns == []
    assert storage.attributes == {}
    assert storage.pkey is None


def test_layer_defaults_have_own_storage():
    first, second = Layer(), Layer()
    assert first.storage is not second.storage
    assert first.ns_prefix == ""
    assert first.retrievable is False


def test_add_and_last():
    ll = LayerList()
    assert ll.last is None
    layer = make_layer("roads")
    ll.add(layer)
    assert ll.last is layer
    assert len(ll) == 1
    assert list(ll) == [layer]


def test_get(layers):
    found = layers.get(f"{URI_A}:roads")
    assert found.name_no_uri == "roads"
    assert layers.get("missing") is None


def test_match_table(layers):
    assert layers.match_table(f"{URI_B}:towns") is True
    assert layers.match_table("missing") is False
    abstract = make_layer("abstract", storage=None)
    layers.add(abstract)
    assert layers.match_table(abstract.name) is False


def test_names_having_storage(layers):
    assert layers.names_having_storage() == [
        f"{URI_A}:roads",
        f"{URI_A}:rivers",
        f"{URI_B}:towns",
    ]


def test_retrievable_and_writable(layers):
    assert layers.all_retrievable() is False
    assert layers.is_retrievable(f"{URI_A}:rivers") is True
    assert layers.is_retrievable("missing") is False
    assert layers.all_writable() is False
    assert layers.is_writable(f"{URI_A}:roads") is True
    assert layers.is_writable(f"{URI_A}:rivers") is False


def test_all_retrievable_true_when_every_layer_is():
    ll = LayerList([make_layer("x", retrievable=True, writable=True)])
    assert ll.all_retrievable() is True
    assert ll.all_writable() is True


def test_contains(layers):
    assert layers.contains(f"{URI_A}:roads") is True
    assert layers.contains("roads") is False
    assert layers.contains_all([f"{URI_A}:roads", f"{URI_B}:towns"]) is True
    assert layers.contains_all([f"{URI_A}:roads", "nope"]) is False


def test_namespaces(layers):
    assert layers.namespaces() == {"a": URI_A, "b": URI_B}


def test_names_by_ns_prefix(layers):
    names = ["a:roads", "b:towns", "a:rivers"]
    assert layers.names_by_ns_prefix(names, "a") == ["a:roads", "a:rivers"]
    assert layers.names_by_ns_prefix(names, "c") == []


def test_ns_prefixes(layers):
    result = layers.ns_prefixes([f"{URI_A}:roads", f"{URI_A}:rivers", f"{URI_B}:towns"])
    assert result == ["a", "gml", "b"]


def test_prefix_uri_round_trip(layers):
    for name in layers.names_having_storage():
        prefixed = layers.uri_to_prefix(name)
        assert layers.prefix_to_uri(prefixed) == name
    assert layers.prefixes_to_uris(["b:towns", "zz:none"]) == [f"{URI_B}:towns", None]


def test_ns_lookups(layers):
    assert layers.ns_prefix_to_ns_uri("b") == URI_B
    assert layers.ns_prefix_to_ns_uri("zz") is None
    assert layers.ns_prefix("a:rivers") == "a"
    assert layers.ns_uri(f"{URI_B}:towns") == URI_B
    assert layers.ns_uri("missing") is None


def test_no_uri_round_trip(layers):
    assert layers.name_no_uri(f"{URI_A}:roads") == "roads"
    assert layers.no_uri_to_uri("towns") == f"{URI_B}:towns"
    assert layers.no_uri_to_uri("missing") is None
    assert layers.name_no_uri("missing") is None