from decimal import Decimal

import pytest

from modules.rate_card.slab_calculator import (
    RateCardError,
    calculate_charges,
    classify_slab,
    cod_charge,
    resolve_zone_label,
    validate_rate_card_payload,
)
from tests.helpers import (
    OPTION2_SLABS,
    REGIONAL_ZONES,
    STANDARD_ZONES,
    rate_card_payload,
)


@pytest.fixture
def rate_card():
    return rate_card_payload()


class TestClassifySlab:
    @pytest.mark.parametrize(
        "condition, expected",
        [
            ("0-250 gm", "first_250g"),
            ("0 - 250 gm", "first_250g"),
            ("250-500 gm", "next_250g"),
            ("Add. 500 gm till 5 kg", "add_500g_till_5kg"),
            ("Upto 5 kgs", "upto_5kg"),
            ("Add. 1 kgs till 10 kg", "add_1kg_till_10kg"),
            ("Upto 10 kgs", "upto_10kg"),
            ("Add. 1 kgs", "add_1kg"),
            ("DTO 0-250 gm", "first_250g"),
        ],
    )
    def test_option1_conditions(self, condition, expected):
        assert classify_slab(condition) == expected

    @pytest.mark.parametrize(
        "condition, expected",
        [
            ("0-5 kg", "upto_5kg"),
            ("Add. 1 kg till 9 kg", "add_1kg_till_9kg"),
            ("10 kg", "flat_10kg"),
            ("Add. 1 kg till 19 kg", "add_1kg_till_19kg"),
            ("20 kg", "flat_20kg"),
            ("Add. 1 kg above 20 kg", "add_1kg_above_20kg"),
        ],
    )
    def test_option2_conditions(self, condition, expected):
        assert classify_slab(condition, "option2") == expected

    def test_unknown_condition_is_rejected(self):
        with pytest.raises(RateCardError):
            classify_slab("Half a tonne")

    def test_empty_condition_is_rejected(self):
        with pytest.raises(RateCardError):
            classify_slab("")


class TestZoneLabels:
    def test_standard_zone_is_upper_cased(self):
        assert resolve_zone_label("c") == "C"

    def test_regional_layout_maps_letters(self):
        assert resolve_zone_label("A", "regional") == "City"
        assert resolve_zone_label("C", "regional") == "Metro"
        assert resolve_zone_label("F", "regional") == "SpecialZone"

    def test_missing_zone_defaults_to_d(self):
        assert resolve_zone_label(None) == "D"


class TestForwardFreight:
    @pytest.mark.parametrize(
        "weight, freight",
        [
            ("0.2", "45.00"),
            ("0.25", "45.00"),
            ("0.5", "61.00"),
            # two extra 500 gm steps
            ("1.2", "131.00"),
            # capped at the 5 kg price
            ("4.8", "300.00"),
            ("5", "300.00"),
            ("7", "380.00"),
            # capped at the 10 kg price
            ("10", "480.00"),
            ("12.5", "594.00"),
        ],
    )
    def test_zone_d_prepaid(self, rate_card, weight, freight):
        breakdown = calculate_charges(rate_card, None, "D", Decimal(weight))

        assert breakdown.freight == Decimal(freight)
        assert breakdown.cod_charges == Decimal("0.00")
        assert breakdown.gst_amount == Decimal("0.00")
        assert breakdown.total == Decimal(freight)

    def test_zone_prices_are_used(self, rate_card):
        breakdown = calculate_charges(rate_card, None, "A", 0.2)

        assert breakdown.zone == "A"
        assert breakdown.freight == Decimal("30.00")

    def test_charge_never_decreases_with_weight(self, rate_card):
        previous = Decimal("0")
        for step in range(1, 300):
            weight = Decimal(step) / Decimal("10")
            freight = calculate_charges(rate_card, None, "E", weight).freight
            assert freight >= previous
            previous = freight

    def test_zero_weight_is_rejected(self, rate_card):
        with pytest.raises(RateCardError):
            calculate_charges(rate_card, None, "D", 0)


class TestCodCharges:
    def test_minimum_amount_applies_to_small_orders(self, rate_card):
        breakdown = calculate_charges(
            rate_card, None, "D", 0.5, payment_mode="COD", cod_amount=1000
        )

        assert breakdown.cod_charges == Decimal("40.00")
        assert breakdown.gst_amount == Decimal("7.20")
        assert breakdown.total == Decimal("108.20")

    def test_percentage_applies_to_large_orders(self, rate_card):
        breakdown = calculate_charges(
            rate_card, None, "D", 0.5, payment_mode="cod", cod_amount=5000
        )

        assert breakdown.cod_charges == Decimal("100.00")
        assert breakdown.gst_amount == Decimal("18.00")
        assert breakdown.total == Decimal("179.00")

    def test_gst_can_be_included_in_the_cod_charge(self, rate_card):
        rate_card["cod_charges"]["gst_additional"] = False

        breakdown = calculate_charges(
            rate_card, None, "D", 0.5, payment_mode="COD", cod_amount=5000
        )

        assert breakdown.gst_amount == Decimal("0.00")
        assert breakdown.total == Decimal("161.00")

    def test_cod_charge_helper(self):
        config = {"percentage": 1.5, "minimum_amount": 30}

        assert cod_charge(config, 1000) == Decimal("30")
        assert cod_charge(config, 4000) == Decimal("60")
        assert cod_charge(config, None) == Decimal("30")


class TestRtoFreight:
    def test_rto_uses_rto_slabs(self, rate_card):
        breakdown = calculate_charges(rate_card, None, "D", 0.5, shipment_type="rto")

        # rto slabs are 5 cheaper per slab
        assert breakdown.freight == Decimal("51.00")

    def test_rto_never_carries_cod(self, rate_card):
        breakdown = calculate_charges(
            rate_card,
            None,
            "D",
            0.5,
            payment_mode="COD",
            cod_amount=5000,
            shipment_type="rto",
        )

        assert breakdown.cod_charges == Decimal("0.00")
        assert breakdown.gst_amount == Decimal("0.00")
        assert breakdown.total == breakdown.freight


class TestOption2Freight:
    @pytest.fixture
    def heavy_card(self):
        return rate_card_payload(slabs=OPTION2_SLABS)

    @pytest.mark.parametrize(
        "weight, freight",
        [
            ("3", "250.00"),
            ("7", "330.00"),
            # capped at the flat 10 kg price
            ("9.5", "420.00"),
            ("15", "595.00"),
            ("25", "850.00"),
        ],
    )
    def test_zone_d(self, heavy_card, weight, freight):
        carrier = {"zone_type": "standard", "weight_slab_type": "option2"}

        breakdown = calculate_charges(heavy_card, carrier, "D", Decimal(weight))

        assert breakdown.freight == Decimal(freight)


class TestRegionalLayout:
    def test_regional_card_is_priced_by_region(self):
        rate_card = rate_card_payload(zones=REGIONAL_ZONES)
        carrier = {"zone_type": "regional", "weight_slab_type": "option1"}

        breakdown = calculate_charges(rate_card, carrier, "C", 0.2)

        assert breakdown.zone == "Metro"
        assert breakdown.freight == Decimal("45.00")

    def test_missing_zone_price_is_an_error(self, rate_card):
        carrier = {"zone_type": "regional", "weight_slab_type": "option1"}

        with pytest.raises(RateCardError):
            calculate_charges(rate_card, carrier, "C", 0.2)


class TestValidateRateCardPayload:
    def test_valid_payload(self, rate_card):
        validate_rate_card_payload(rate_card, zone_labels=STANDARD_ZONES)

    def test_missing_zone_is_reported(self, rate_card):
        del rate_card["forward_charges"][0]["zones"]["F"]

        with pytest.raises(RateCardError, match="missing zones: F"):
            validate_rate_card_payload(rate_card, zone_labels=STANDARD_ZONES)

    def test_unknown_zone_is_reported(self, rate_card):
        rate_card["rto_charges"][0]["zones"]["Z"] = 10

        with pytest.raises(RateCardError, match="Unknown zone Z"):
            validate_rate_card_payload(rate_card, zone_labels=STANDARD_ZONES)

    def test_non_numeric_price_is_reported(self, rate_card):
        rate_card["forward_charges"][1]["zones"]["A"] = "forty"

        with pytest.raises(RateCardError, match="must be a number"):
            validate_rate_card_payload(rate_card)

    def test_negative_cod_percentage_is_reported(self, rate_card):
        rate_card["cod_charges"]["percentage"] = -1

        with pytest.raises(RateCardError, match="COD percentage"):
            validate_rate_card_payload(rate_card)

    def test_unrecognised_condition_is_reported(self, rate_card):
        rate_card["forward_charges"][0]["condition"] = "Anything"

        with pytest.raises(RateCardError, match="Unrecognised"):
            validate_rate_card_payload(rate_card)
