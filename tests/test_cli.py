"""Tests for command-line argument handling."""
from __future__ import annotations

from pathlib import Path

from pagesnap.cli import build_parser, config_from_args, options_from_args
from pagesnap.config import RELAY_TIMEOUT_SECONDS, SnapshotOptions


def test_defaults_match_snapshot_options() -> None:
    args = build_parser().parse_args(["https://example.com"])
    assert options_from_args(args) == SnapshotOptions()
    assert args.stdout is False


def test_flags_toggle_options() -> None:
    args = build_parser().parse_args(
        ["https://example.com", "--keep-scripts", "--keep-styles", "--direct-fetch", "--csp"]
    )
    assert options_from_args(args) == SnapshotOptions(
        remove_scripts=False,
        remove_original_styles=False,
        use_relay_fetch=False,
        add_csp=True,
    )


def test_config_from_args(tmp_path) -> None:
    args = build_parser().parse_args(
        ["https://a.test", "https://b.test", "--output", str(tmp_path), "--wait", "0", "--timeout", "5"]
    )
    config = config_from_args(args)
    assert args.urls == ["https://a.test", "https://b.test"]
    assert config.output_root == Path(tmp_path).resolve()
    assert config.wait_after_load == 0
    assert config.navigation_timeout == 5
    assert config.relay_timeout == RELAY_TIMEOUT_SECONDS
