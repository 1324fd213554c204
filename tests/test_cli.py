"""Tests for CLI subcommands."""
from argparse import Namespace
from unittest.mock import patch

from spark.cli.main import cmd_add, cmd_ideas, cmd_spark
from spark.ideas.service import list_ideas, list_inbox


class TestIdeasCommand:
    def test_new_and_list(self, tmp_settings, capsys):
        assert cmd_ideas(Namespace(action="new", title="Quiet tech", id=None, status="active")) == 0
        assert [i.title for i in list_ideas()] == ["Quiet tech"]

        cmd_ideas(Namespace(action="list", title=None, id=None, status="active"))
        assert "Quiet tech  (0 elements, active)" in capsys.readouterr().out

    def test_new_requires_title(self, tmp_settings):
        assert cmd_ideas(Namespace(action="new", title=None, id=None, status="active")) == 1

    def test_empty_list(self, tmp_settings, capsys):
        cmd_ideas(Namespace(action="list", title=None, id=None, status="active"))
        assert "No ideas yet." in capsys.readouterr().out


class TestAddCommand:
    def test_adds_thought_to_inbox(self, tmp_settings, capsys):
        cmd_add(Namespace(text="a loose thought", idea=None, drawer=False))
        assert "Added thought" in capsys.readouterr().out
        assert [e.content for e in list_inbox()] == ["a loose thought"]


class TestSparkCommand:
    def test_prints_reply(self, sample_idea, fake_llm, capsys):
        with patch("spark.thinking.agent.get_llm_client", return_value=fake_llm):
            cmd_spark(Namespace(idea="idea-1", type="challenge", prompt=None))
        assert fake_llm.reply in capsys.readouterr().out
