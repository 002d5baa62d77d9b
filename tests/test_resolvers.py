"""Tests for the per-field priority cascades."""

from wishlist_scraper.layers.jsonld import normalize_product_nodes
from wishlist_scraper.layers.resolvers import (
    parse_price,
    resolve_currency,
    resolve_description,
    resolve_image,
    resolve_price,
    resolve_title,
)
from wishlist_scraper.models.product import PageMetadata


def _meta(tags=None, jsonld=None) -> PageMetadata:
    return PageMetadata(tags=tags or {}, jsonld=jsonld or [])


def _products(metadata: PageMetadata):
    return normalize_product_nodes(metadata.jsonld)


# --- Title / description / image ---


def test_og_title_beats_plain_title() -> None:
    metadata = _meta({"og:title": "A", "title": "B"})
    resolved = resolve_title(metadata, _products(metadata))

    assert resolved.value == "A"
    assert resolved.source == "tag:og:title"


def test_title_cascade_order() -> None:
    metadata = _meta({"twitter:title": "T", "title": "B"})
    assert resolve_title(metadata, []).value == "T"

    metadata = _meta({"title": "B"})
    assert resolve_title(metadata, []).value == "B"


def test_title_from_product_name_when_tags_missing() -> None:
    metadata = _meta(jsonld=[{"@type": "Product", "name": "Desk Lamp"}])
    assert resolve_title(metadata, _products(metadata)).value == "Desk Lamp"


def test_empty_tag_values_do_not_win() -> None:
    metadata = _meta({"og:title": "", "twitter:title": "Real"})
    assert resolve_title(metadata, []).value == "Real"


def test_non_product_nodes_are_ignored() -> None:
    metadata = _meta(jsonld=[{"@type": "WebPage", "name": "Page", "description": "About"}])
    products = _products(metadata)

    assert resolve_title(metadata, products) is None
    assert resolve_description(metadata, products) is None


def test_description_cascade() -> None:
    metadata = _meta(
        {"twitter:description": "tw", "description": "plain"},
        [{"@type": "Product", "description": "ld"}],
    )
    assert resolve_description(metadata, _products(metadata)).value == "tw"

    metadata = _meta(jsonld=[{"@type": "Product", "description": "ld"}])
    assert resolve_description(metadata, _products(metadata)).value == "ld"


def test_image_from_jsonld_array() -> None:
    metadata = _meta(jsonld=[{"@type": "Product", "image": ["https://a/1.jpg", "https://a/2.jpg"]}])
    assert resolve_image(metadata, _products(metadata)).value == "https://a/1.jpg"


def test_image_tag_beats_jsonld() -> None:
    metadata = _meta({"twitter:image": "https://a/tw.jpg"}, [{"@type": "Product", "image": "https://a/ld.jpg"}])
    assert resolve_image(metadata, _products(metadata)).value == "https://a/tw.jpg"


def test_fields_can_come_from_different_product_nodes() -> None:
    metadata = _meta(jsonld=[
        {"@type": "Product", "name": "First"},
        {"@type": "Product", "name": "Second", "description": "From second"},
    ])
    products = _products(metadata)

    assert resolve_title(metadata, products).value == "First"
    assert resolve_description(metadata, products).value == "From second"


# --- Price ---


def test_jsonld_offer_beats_price_tag() -> None:
    metadata = _meta({"price": "99.00"}, [{"@type": "Product", "offers": {"price": "49.99"}}])
    resolved = resolve_price(metadata, _products(metadata))

    assert resolved.value == "49.99"
    assert resolved.source == "jsonld:offers"


def test_numeric_offer_price_is_stringified() -> None:
    metadata = _meta(jsonld=[{"@type": "Product", "offers": [{"price": 49.99}]}])
    assert resolve_price(metadata, _products(metadata)).value == "49.99"


def test_aggregate_offer_low_then_high() -> None:
    metadata = _meta(jsonld=[{"@type": "Product", "offers": {"@type": "AggregateOffer", "lowPrice": "10", "highPrice": "20"}}])
    assert resolve_price(metadata, _products(metadata)).value == "10"

    metadata = _meta(jsonld=[{"@type": "Product", "offers": {"highPrice": "20"}}])
    assert resolve_price(metadata, _products(metadata)).value == "20"


def test_offer_price_with_thousands_separator() -> None:
    metadata = _meta(jsonld=[{"@type": "Product", "offers": {"price": "1,299.00"}}])
    assert resolve_price(metadata, _products(metadata)).value == "1299.00"


def test_price_tags_in_order() -> None:
    metadata = _meta({"product:price:amount": "$12.50", "price": "99"})
    resolved = resolve_price(metadata, [])

    assert resolved.value == "12.50"
    assert resolved.source == "tag:product:price:amount"


def test_non_numeric_price_tag_is_skipped() -> None:
    metadata = _meta({"og:price:amount": "call us", "twitter:data1": "€ 7.25"})
    assert resolve_price(metadata, []).value == "7.25"


def test_symbol_regex_on_description() -> None:
    metadata = _meta()
    assert resolve_price(metadata, [], description="Now only $19.99!").value == "19.99"


def test_currency_code_regex_when_no_symbol() -> None:
    metadata = _meta()
    resolved = resolve_price(metadata, [], description="USD 25.50 today")

    assert resolved.value == "25.50"
    assert resolved.source == "text:code"


def test_symbol_in_title_beats_code_in_description() -> None:
    metadata = _meta()
    resolved = resolve_price(metadata, [], description="EUR 30.00", title="Mug - £8.00")
    assert resolved.value == "8.00"


def test_description_checked_before_title() -> None:
    metadata = _meta()
    resolved = resolve_price(metadata, [], description="was $1,050.00", title="$5.00 off")
    assert resolved.value == "1050.00"


def test_no_price_anywhere() -> None:
    assert resolve_price(_meta(), [], description="No numbers", title="Plain") is None


def test_parse_price() -> None:
    assert parse_price("$1,234.56") == "1234.56"
    assert parse_price("1.2.3") is None
    assert parse_price(".") is None
    assert parse_price("") is None
    assert parse_price(None) is None


def test_non_ascii_digit_prices_are_not_prices() -> None:
    assert parse_price("١٢٣") is None
    assert resolve_price(_meta({"og:price:amount": "١٢٣"}), []) is None
    assert resolve_price(_meta(), [], description="only $١٩.٩٩") is None


def test_non_ascii_digit_tag_falls_through_to_next_tag() -> None:
    metadata = _meta({"og:price:amount": "٤٥", "product:price:amount": "45.00"})
    assert resolve_price(metadata, []).value == "45.00"


# --- Currency ---


def test_currency_defaults_to_usd_even_with_regex_price() -> None:
    metadata = _meta()
    assert resolve_price(metadata, [], description="Only €12.00").value == "12.00"
    assert resolve_currency(metadata, []).value == "USD"


def test_currency_from_offer_uppercased() -> None:
    metadata = _meta(jsonld=[{"@type": "Product", "offers": {"price": "5", "priceCurrency": "gbp"}}])
    assert resolve_currency(metadata, _products(metadata)).value == "GBP"


def test_currency_tag_overrides_offer() -> None:
    metadata = _meta(
        {"product:price:currency": "cad"},
        [{"@type": "Product", "offers": {"price": "5", "priceCurrency": "EUR"}}],
    )
    resolved = resolve_currency(metadata, _products(metadata))

    assert resolved.value == "CAD"
    assert resolved.source == "tag:product:price:currency"


def test_currency_from_offer_without_price() -> None:
    metadata = _meta(
        {"og:price:amount": "10"},
        [{"@type": "Product", "offers": {"priceCurrency": "JPY"}}],
    )
    products = _products(metadata)

    assert resolve_price(metadata, products).source == "tag:og:price:amount"
    assert resolve_currency(metadata, products).value == "JPY"
