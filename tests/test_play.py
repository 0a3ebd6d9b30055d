"""Tests for the play CLI (HTTP calls mocked)."""

import random
import sys
from unittest.mock import MagicMock, patch

import pytest

from pixel_reveal.play import _hidden_cells, main, play


def _resp(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


SNAPSHOT = {
    "level": 1,
    "width": 4,
    "height": 3,
    "revealed_count": 0,
    "total_cells": 10,
    "clicks": 0,
    "motif": "circle",
    "bonus_reveal": False,
}


class TestHiddenCells:
    def test_all_hidden(self):
        assert len(_hidden_cells({"current_pixels": []}, 4, 3)) == 12

    def test_excludes_revealed(self):
        hidden = _hidden_cells({"current_pixels": [0, 5]}, 4, 3)
        assert (0, 0) not in hidden
        assert (1, 1) not in hidden
        assert (2, 1) in hidden


class TestPlay:
    @patch("pixel_reveal.play.requests")
    def test_clicks_hidden_cells(self, mock_requests):
        clicked = {**SNAPSHOT, "clicks": 1, "revealed_count": 1}
        mock_requests.get.side_effect = [
            _resp(SNAPSHOT),
            _resp({"total_clicks": 0, "current_level": 1, "current_pixels": list(range(11))}),
        ]
        mock_requests.post.return_value = _resp(
            {"accepted": True, "snapshot": clicked, "level_completed": None, "message": None}
        )

        result = play("http://server/", "alice", 1, random.Random(0))

        assert result == clicked
        mock_requests.post.assert_called_once()
        args, kwargs = mock_requests.post.call_args
        assert args[0] == "http://server/api/game/alice/click"
        assert kwargs["json"] == {"x": 3, "y": 2}

    @patch("pixel_reveal.play.requests")
    def test_reset_first(self, mock_requests):
        mock_requests.get.return_value = _resp(SNAPSHOT)
        mock_requests.post.return_value = _resp(SNAPSHOT)
        play("http://server", "alice", 0, random.Random(0), reset=True)
        assert mock_requests.post.call_args[0][0] == "http://server/api/game/alice/reset"

    @patch("pixel_reveal.play.requests")
    def test_prints_level_completion(self, mock_requests, capsys):
        mock_requests.get.side_effect = [
            _resp(SNAPSHOT),
            _resp({"current_pixels": []}),
        ]
        mock_requests.post.return_value = _resp(
            {
                "accepted": True,
                "snapshot": {**SNAPSHOT, "level": 2, "width": 5, "height": 4, "clicks": 10},
                "level_completed": 2,
                "message": "Level complete! You reached level 2.",
            }
        )
        play("http://server", "alice", 1, random.Random(0))
        assert "You reached level 2" in capsys.readouterr().out


class TestMain:
    @patch("pixel_reveal.play.play")
    def test_main_prints_snapshot(self, mock_play, tmp_path, monkeypatch, capsys):
        config = tmp_path / "game.yaml"
        config.write_text("server_url: http://example:9000\n")
        mock_play.return_value = SNAPSHOT
        monkeypatch.setattr(
            sys, "argv", ["pixel-reveal-play", "alice", "--clicks", "3", "--config", str(config)]
        )
        main()
        args = mock_play.call_args[0]
        assert args[0] == "http://example:9000"
        assert args[1] == "alice"
        assert args[2] == 3
        assert '"level": 1' in capsys.readouterr().out

    def test_main_missing_config(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            sys, "argv", ["pixel-reveal-play", "alice", "--config", str(tmp_path / "none.yaml")]
        )
        with pytest.raises(SystemExit):
            main()
