"""Tests for operator confirmation capabilities."""

from unittest.mock import patch

import click
import pytest

from amldeploy.lib.prompts import AlwaysConfirm, InteractiveConfirmer, ScriptedConfirmer


@pytest.mark.unit
class TestScriptedConfirmer:
    """Tests for ScriptedConfirmer."""

    def test_replays_answers_in_order(self) -> None:
        """Test that answers are consumed in order and prompts recorded."""
        confirm = ScriptedConfirmer([True, False])

        assert confirm("First?") is True
        assert confirm("Second?") is False
        assert confirm.prompts == ["First?", "Second?"]

    def test_unexpected_prompt_raises(self) -> None:
        """Test that running out of answers fails loudly."""
        confirm = ScriptedConfirmer()

        with pytest.raises(AssertionError, match="Unexpected confirmation prompt"):
            confirm("Delete endpoint llm-endpoint?")


@pytest.mark.unit
class TestAlwaysConfirm:
    """Tests for AlwaysConfirm."""

    def test_always_true(self) -> None:
        """Test that every prompt is accepted regardless of default."""
        confirm = AlwaysConfirm()

        assert confirm("Continue?", False) is True
        assert confirm("Continue?", True) is True


@pytest.mark.unit
class TestInteractiveConfirmer:
    """Tests for InteractiveConfirmer."""

    @patch("amldeploy.lib.prompts.click.confirm", return_value=True)
    def test_delegates_to_click(self, mock_confirm) -> None:
        """Test that the prompt and default are passed to click.confirm."""
        assert InteractiveConfirmer()("Do you want to update it?") is True
        mock_confirm.assert_called_once_with("Do you want to update it?", default=False)

    @pytest.mark.parametrize("default", [True, False])
    def test_abort_counts_as_no(self, default: bool) -> None:
        """Test that end of input or Ctrl-C at the prompt declines."""
        with patch(
            "amldeploy.lib.prompts.click.confirm", side_effect=click.Abort()
        ) as mock_confirm:
            assert InteractiveConfirmer()("Continue?", default) is False

        mock_confirm.assert_called_once_with("Continue?", default=default)
