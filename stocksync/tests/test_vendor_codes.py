"""Tests for vendor code classification and identity extraction."""

import pytest

from stocksync.config import SyncConfig
from stocksync.vendor_codes import (
    SourceKind,
    VendorCodeClassifier,
    VendorCodeError,
    bag_lookup_key,
    parse_pack_size,
    split_vendor_code,
)


@pytest.fixture
def classifier():
    return VendorCodeClassifier(SyncConfig())


class TestClassify:
    """First matching family wins."""

    @pytest.mark.parametrize("vendor_code", [
        "growme_12",
        "growmect_7",
        "soil_10_3",
        "yant_1_2",
        "sunterra_5_1",
        "kormilitsa_2_4",
        "fertilizer_8_2",
        "f_500_3",
        "korennik_3_1",
    ])
    def test_fixed_price_family(self, classifier, vendor_code):
        assert classifier.classify(vendor_code) is SourceKind.FIXED_PRICE

    def test_bag_family(self, classifier):
        assert classifier.classify("bubblebags_19336_100") is SourceKind.SCRAPED_B

    def test_box_family(self, classifier):
        assert classifier.classify("box_77_20") is SourceKind.SCRAPED_A

    def test_legacy_family(self, classifier):
        assert classifier.classify("bubblebags_9120_50") is SourceKind.LEGACY

    @pytest.mark.parametrize("vendor_code", [
        "box_77",
        "box_77_20_x",
        "Box_77_20",
        "bubblebags_2000_10",
        "growme_",
        "",
        "something",
    ])
    def test_unclassified(self, classifier, vendor_code):
        assert classifier.classify(vendor_code) is SourceKind.UNCLASSIFIED

    def test_fixed_price_checked_before_legacy(self):
        """A code in both families is fixed price because that family comes first."""
        config = SyncConfig(legacy_patterns=[r"^soil_\d+_\d+$"])
        classifier = VendorCodeClassifier(config)
        assert classifier.classify("soil_1_2") is SourceKind.FIXED_PRICE

    @pytest.mark.parametrize("vendor_code", [
        "box_77_20\n",
        "f_500_3\n",
        "bubblebags_19336_100\n",
    ])
    def test_trailing_newline_is_not_a_match(self, classifier, vendor_code):
        assert classifier.classify(vendor_code) is SourceKind.UNCLASSIFIED


class TestIdentity:
    """Identity fields derived per family."""

    def test_box_identity(self, classifier):
        identity = classifier.identify("box_77_20", nm_id=1)
        assert identity.kind is SourceKind.SCRAPED_A
        assert identity.product_key == "77"
        assert identity.pack_size == 20
        assert identity.lookup_key is None

    def test_bag_identity_has_lookup_key(self, classifier):
        identity = classifier.identify("bubblebags_19336_100", nm_id=1)
        assert identity.product_key == "19336"
        assert identity.pack_size == 100
        assert identity.lookup_key == "bubblebags_19336"

    def test_pack_size_ignored_without_use_pcs(self):
        classifier = VendorCodeClassifier(SyncConfig(use_pcs=False))
        identity = classifier.identify("box_77_20", nm_id=1)
        assert identity.pack_size == 1

    def test_fixed_price_keyed_by_card_id(self, classifier):
        identity = classifier.identify("f_500_3", nm_id=500)
        assert identity.kind is SourceKind.FIXED_PRICE
        assert identity.product_key == "500"
        assert identity.pack_size == 3

    def test_fixed_price_reads_pack_size_even_without_use_pcs(self):
        classifier = VendorCodeClassifier(SyncConfig(use_pcs=False))
        assert classifier.identify("soil_10_3", nm_id=9).pack_size == 3

    def test_fixed_price_without_pack_segment(self, classifier):
        assert classifier.identify("growme_12", nm_id=12).pack_size == 1

    def test_too_few_segments(self, classifier):
        with pytest.raises(VendorCodeError):
            classifier.extract(SourceKind.SCRAPED_A, "box", nm_id=1)


class TestHelpers:

    @pytest.mark.parametrize("vendor_code,expected", [
        ("bag_19336_100", "bag_19336"),
        ("bubblebags_19336_100", "bubblebags_19336"),
        ("bubblebags_1_5", "bubblebags_1"),
        ("nounderscore", "nounderscore"),
    ])
    def test_bag_lookup_key_drops_pack_suffix(self, vendor_code, expected):
        assert bag_lookup_key(vendor_code) == expected

    def test_parse_pack_size_defaults(self):
        assert parse_pack_size(["box", "1"]) == 1
        assert parse_pack_size(["box", "1", "x"]) == 1
        assert parse_pack_size(["box", "1", "30"]) == 30

    def test_split_requires_two_segments(self):
        assert split_vendor_code("a_b") == ["a", "b"]
        with pytest.raises(VendorCodeError):
            split_vendor_code("ab")
