"""Tests for erasing the target configuration."""

from unittest.mock import Mock

import pytest

from voice_routing_migrator import EntityNotFoundError, UserCancelledError
from voice_routing_migrator.eraser import confirm_erase, erase_target
from voice_routing_migrator.models import Gateway, RuleSlot


@pytest.mark.unit
class TestConfirmErase:
    def test_confirmed(self, make_prompt) -> None:
        prompt = make_prompt(confirm=True)
        confirm_erase(prompt)
        assert len(prompt.confirmations) == 1

    def test_declined_raises(self, make_prompt) -> None:
        with pytest.raises(UserCancelledError, match="not confirmed"):
            confirm_erase(make_prompt(confirm=False))


@pytest.mark.unit
class TestEraseTarget:
    def test_removes_everything_but_gateways(self, memory_target) -> None:
        memory_target.add_gateways("gw1.example.com", "gw2.example.com")
        memory_target.dialplans["HQ"] = {"identity": "HQ"}
        memory_target.voice_routes["R1"] = {"identity": "R1"}
        memory_target.routing_policies["P1"] = {"identity": "P1"}
        memory_target.pstn_usages.extend(["Local", "LD"])
        memory_target.add_rule("Strip", "^1", "2")
        memory_target.attachments[("gw1.example.com", RuleSlot.CALLING)] = ["Strip"]

        erase_target(memory_target)

        assert memory_target.dialplans == {}
        assert memory_target.voice_routes == {}
        assert memory_target.routing_policies == {}
        assert memory_target.pstn_usages == []
        assert memory_target.translation_rules == {}
        assert memory_target.attachments == {}
        assert set(memory_target.gateways) == {"gw1.example.com", "gw2.example.com"}

    def test_both_slots_cleared_on_every_gateway(self, memory_target) -> None:
        memory_target.add_gateways("gw1.example.com", "gw2.example.com")

        erase_target(memory_target)

        cleared = [detail for kind, detail in memory_target.writes if kind == "clear_gateway_translation_rules"]
        assert cleared == [
            "gw1.example.com/outbound_calling",
            "gw1.example.com/outbound_called",
            "gw2.example.com/outbound_calling",
            "gw2.example.com/outbound_called",
        ]

    def test_not_found_is_tolerated_and_steps_are_independent(self) -> None:
        target = Mock()
        target.delete_all_dialplans.side_effect = EntityNotFoundError("gone", 404)
        target.clear_pstn_usages.side_effect = EntityNotFoundError("gone", 404)
        target.list_gateways.return_value = [Gateway("gw1")]
        target.clear_gateway_translation_rules.side_effect = EntityNotFoundError("gone", 404)

        erase_target(target)

        target.delete_all_voice_routes.assert_called_once()
        target.delete_all_voice_routing_policies.assert_called_once()
        assert target.clear_gateway_translation_rules.call_count == 2
        target.delete_all_translation_rules.assert_called_once()
