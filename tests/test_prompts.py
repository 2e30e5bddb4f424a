"""Tests for the console operator prompt."""

import pytest

from voice_routing_migrator.exceptions import UserCancelledError
from voice_routing_migrator.gateways import GatewayAction, GatewayOption
from voice_routing_migrator.prompts import ConsolePrompt


def _prompt(*answers: str) -> tuple[ConsolePrompt, list[str]]:
    replies = list(answers)
    output: list[str] = []

    def read(question: str) -> str:
        output.append(question)
        if not replies:
            raise EOFError
        return replies.pop(0)

    return ConsolePrompt(read=read, write=output.append), output


@pytest.mark.unit
class TestConsolePrompt:
    @pytest.mark.parametrize(("answer", "expected"), [("y", True), (" YES ", True), ("n", False), ("", False)])
    def test_confirm(self, answer: str, expected: bool) -> None:
        prompt, output = _prompt(answer)
        assert prompt.confirm("Erase?") is expected
        assert output == ["Erase? [y/N]: "]

    def test_confirm_end_of_input_is_no(self) -> None:
        prompt, _ = _prompt()
        assert prompt.confirm("Erase?") is False

    def test_select_gateway_lists_numbered_options(self) -> None:
        prompt, output = _prompt("2")
        options = [
            GatewayOption(GatewayAction.EXISTING, "Use existing gateway t1", "t1"),
            GatewayOption(GatewayAction.SKIP, "Skip"),
        ]

        assert prompt.select_gateway("sbc1", options) == 2
        assert output == [
            "\nNo target gateway named sbc1. Choose what to do:",
            "  1. Use existing gateway t1",
            "  2. Skip",
            "Selection: ",
        ]

    def test_select_gateway_non_numeric_answer(self) -> None:
        prompt, _ = _prompt("two")
        assert prompt.select_gateway("sbc1", [GatewayOption(GatewayAction.SKIP, "Skip")]) is None

    def test_select_gateway_end_of_input_cancels(self) -> None:
        prompt, _ = _prompt()
        with pytest.raises(UserCancelledError, match="matching gateway sbc1"):
            prompt.select_gateway("sbc1", [GatewayOption(GatewayAction.SKIP, "Skip")])
