import json
import math

import pytest

from core.errors import CatalogFormatError
from core.vector_store.catalog_store import (
    SAMPLE_CATALOG,
    ProductCatalog,
    cosine_similarity,
    get_catalog,
    parse_catalog,
)
from core.vector_store.parsing import parse_feature_vector


@pytest.fixture
def catalog():
    return ProductCatalog(parse_catalog(SAMPLE_CATALOG))


def test_query_with_catalog_vector_finds_itself(catalog):
    query = SAMPLE_CATALOG["vectors"][2]
    matches = catalog.find_nearest(query, k=3)
    assert matches[0].product.id == "P003"
    assert matches[0].product.name == "Zyn Citrus"
    assert matches[0].similarity == pytest.approx(1.0)


@pytest.mark.parametrize("k", [1, 3, 5, 10])
def test_matches_sorted_and_limited(catalog, k):
    matches = catalog.find_nearest([1.0] * 11, k=k)
    assert len(matches) == min(k, 5)
    similarities = [m.similarity for m in matches]
    assert similarities == sorted(similarities, reverse=True)


def test_non_positive_k_returns_nothing(catalog):
    assert catalog.find_nearest([1.0] * 11, k=0) == []


def test_non_finite_query_rejected(catalog):
    with pytest.raises(ValueError):
        catalog.find_nearest([math.nan] * 11)


def test_match_serialization(catalog):
    match = catalog.find_nearest(SAMPLE_CATALOG["vectors"][1], k=1)[0]
    assert match.to_dict() == {
        "productId": "P002",
        "name": "LYFT Freeze",
        "strength": "X-Strong",
        "similarity": match.similarity,
    }


def test_cosine_similarity_is_symmetric_and_bounded():
    a = [0.2, -1.5, 3.0, 0.0]
    b = [1.0, 0.5, -0.25, 2.0]
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))
    assert -1.0 <= cosine_similarity(a, b) <= 1.0
    assert cosine_similarity(a, a) == pytest.approx(1.0)
    assert cosine_similarity(a, [-x for x in a]) == pytest.approx(-1.0)


def test_huge_components_do_not_overflow():
    assert cosine_similarity([1e200, 1e200], [1e200, -1e200]) == pytest.approx(0.0)
    assert cosine_similarity([1e300, 0.0], [2e300, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([1e-300, 1e-300], [1e-300, 1e-300]) == pytest.approx(1.0)


def test_zero_vector_has_zero_similarity():
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert cosine_similarity([], [1.0]) == 0.0


def test_dimension_mismatch_uses_shared_prefix():
    assert cosine_similarity([1.0, 0.0, 5.0], [1.0, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([0.0, 1.0], [1.0, 0.0, 9.0]) == pytest.approx(0.0)


def test_ties_keep_catalog_order():
    catalog = ProductCatalog(parse_catalog({"vectors": [[1, 0], [2, 0], [0, 1]]}))
    assert [m.product.id for m in catalog.find_nearest([1, 0], k=3)] == ["P001", "P002", "P003"]


def test_missing_products_get_synthetic_ids():
    products = parse_catalog({"vectors": [[1.0], [2.0]], "products": [{"id": "A", "name": "Alpha"}]})
    assert [(p.id, p.name) for p in products] == [("A", "Alpha"), ("P002", "Product 2")]
    assert products[1].strength is None


@pytest.mark.parametrize(
    "data",
    [
        None,
        [],
        {"products": []},
        {"vectors": "oops"},
        {"vectors": [[1.0, "x"]]},
        {"vectors": [[]]},
        {"vectors": [[True, 1.0]]},
        {"vectors": [[1.0], [2.0]], "products": [{"id": "A"}, {"id": "A"}]},
        {"vectors": [[10**400, 1.0]]},
        {"vectors": [[1.0]], "products": ["not an object"]},
    ],
)
def test_malformed_catalog_rejected(data):
    with pytest.raises(CatalogFormatError):
        parse_catalog(data)


def test_malformed_load_keeps_previous_catalog(catalog):
    assert catalog.load({"vectors": [[1.0, "x"]]}) is False
    assert len(catalog) == 5
    assert catalog.get("P001").name == "Nordic Spirit Mint"


def test_oversized_integer_load_keeps_previous_catalog(catalog):
    data = json.loads('{"vectors": [[1' + "0" * 400 + ', 1]]}')
    assert catalog.load(data) is False
    assert len(catalog) == 5


def test_oversized_query_rejected(catalog):
    with pytest.raises(ValueError):
        catalog.find_nearest([10**400] + [1.0] * 10)


def test_load_replaces_catalog(catalog):
    assert catalog.load({"vectors": [[0.5, 0.5]], "products": [{"id": "X1", "name": "New"}]})
    assert len(catalog) == 1
    assert catalog.get("P001") is None
    assert catalog.search([1.0, 1.0], k=2) == [("X1", pytest.approx(1.0))]


def test_load_json_and_file(catalog, tmp_path):
    assert catalog.load_json("{not json") is False
    assert len(catalog) == 5

    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"vectors": [[1, 2, 3]]}), encoding="utf-8")
    assert catalog.load_file(path)
    assert [p.id for p in catalog.products] == ["P001"]
    assert catalog.load_file(tmp_path / "missing.json") is False


def test_get_catalog_is_seeded_singleton():
    assert get_catalog() is get_catalog()
    assert len(get_catalog()) >= 1


@pytest.mark.parametrize(
    "value, expected",
    [
        ('{"vectors": [[1, 2], [3, 4]]}', [1.0, 2.0]),
        ("[0.5, 1]", [0.5, 1.0]),
        ({"vector": [3, 4]}, [3.0, 4.0]),
        ([7], [7.0]),
    ],
)
def test_parse_feature_vector_shapes(value, expected):
    assert parse_feature_vector(value) == expected


@pytest.mark.parametrize(
    "value",
    ["{broken", '{"other": 1}', "[]", '["a"]', {"vector": "abc"}, 42, "[true]", [10**400], "[NaN]"],
)
def test_parse_feature_vector_invalid(value):
    assert parse_feature_vector(value) is None
