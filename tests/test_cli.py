import logging

import pytest
from click.testing import CliRunner

from zg_storage import cli as cli_module
from zg_storage.cli import cli
from zg_storage.config import settings
from zg_storage.errors import UploadError

PRIVATE_KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def built_states(monkeypatch, manager):
    """Route the CLI to the fake-backed manager and record the state it was built from."""
    states = []

    def build_manager(state):
        states.append(state)
        return manager

    monkeypatch.setattr(cli_module, "build_manager", build_manager)
    return states


def test_upload_prints_result(runner, built_states, fake_client, sample_file):
    result = runner.invoke(cli, ["-k", PRIVATE_KEY, "upload", str(sample_file)])

    assert result.exit_code == 0, result.output
    assert f"Uploading {sample_file}..." in result.output
    assert "Root hash: 0x" in result.output
    assert f"Transaction hash: {fake_client.transaction_hash}" in result.output
    assert built_states[0].private_key == PRIVATE_KEY


def test_upload_failure_exits_non_zero(runner, built_states, fake_client, sample_file):
    fake_client.upload_error = UploadError("insufficient funds for gas")

    result = runner.invoke(cli, ["-k", PRIVATE_KEY, "upload", str(sample_file)])

    assert result.exit_code == 1
    assert "Error: Upload error: insufficient funds for gas" in result.output


def test_unexpected_upload_failure_exits_non_zero(runner, built_states, fake_client, sample_file):
    fake_client.upload_error = RuntimeError("connection refused")

    result = runner.invoke(cli, ["-k", PRIVATE_KEY, "upload", str(sample_file)])

    assert result.exit_code == 1
    assert "Error: Upload failed: connection refused" in result.output


def test_upload_of_missing_path_is_usage_error(runner, built_states, tmp_path):
    result = runner.invoke(cli, ["-k", PRIVATE_KEY, "upload", str(tmp_path / "missing.txt")])

    assert result.exit_code != 0
    assert built_states == []


def test_key_is_required(runner, built_states):
    result = runner.invoke(cli, ["config"], env={"ZG_PRIVATE_KEY": None})

    assert result.exit_code == 2
    assert "Missing option" in result.output


def test_key_can_come_from_environment(runner, built_states, sample_file):
    result = runner.invoke(cli, ["upload", str(sample_file)], env={"ZG_PRIVATE_KEY": PRIVATE_KEY})

    assert result.exit_code == 0, result.output
    assert built_states[0].private_key == PRIVATE_KEY


def test_round_trip_through_cli(runner, built_states, sample_file, tmp_path):
    uploaded = runner.invoke(cli, ["-k", PRIVATE_KEY, "upload", str(sample_file)])
    root_hash = next(
        line.split(": ", 1)[1] for line in uploaded.output.splitlines() if line.startswith("Root hash: ")
    )
    output = tmp_path / "copy.txt"

    result = runner.invoke(cli, ["-k", PRIVATE_KEY, "download", root_hash, "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert f"File saved to {output}" in result.output
    assert output.read_bytes() == sample_file.read_bytes()


def test_download_defaults_to_downloads_directory(runner, built_states, manager, sample_file, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "download_dir", tmp_path / "downloads")
    root_hash = manager.upload(sample_file).root_hash

    result = runner.invoke(cli, ["-k", PRIVATE_KEY, "download", root_hash])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "downloads" / root_hash).read_bytes() == sample_file.read_bytes()


def test_download_of_garbage_root_hash_writes_nothing(runner, built_states, fake_client, tmp_path):
    output = tmp_path / "out.bin"

    result = runner.invoke(cli, ["-k", PRIVATE_KEY, "download", "garbage", "-o", str(output)])

    assert result.exit_code == 1
    assert "Download error: invalid root hash" in result.output
    assert not output.exists()
    assert fake_client.download_calls == []


def test_download_of_unknown_root_hash_fails(runner, built_states, tmp_path):
    output = tmp_path / "out.bin"

    result = runner.invoke(cli, ["-k", PRIVATE_KEY, "download", "0x" + "00" * 32, "-o", str(output)])

    assert result.exit_code == 1
    assert "Error: Download error: file not found" in result.output
    assert not output.exists()


def test_config_prints_endpoints_without_building_client(runner, monkeypatch):
    def refuse(state):
        raise AssertionError("config must not build a storage client")

    monkeypatch.setattr(cli_module, "build_manager", refuse)

    result = runner.invoke(cli, ["-k", PRIVATE_KEY, "config"])

    assert result.exit_code == 0, result.output
    assert f"RPC URL: {settings.rpc_url}" in result.output
    assert f"Flow contract: {settings.flow_contract}" in result.output
    assert f"Indexer RPC: {settings.indexer_rpc}" in result.output
    assert PRIVATE_KEY not in result.output


def test_config_reflects_endpoint_overrides(runner):
    result = runner.invoke(
        cli,
        ["-k", PRIVATE_KEY, "--rpc-url", "https://rpc.example/", "--indexer", "https://indexer.example/", "config"],
    )

    assert result.exit_code == 0, result.output
    assert "RPC URL: https://rpc.example/" in result.output
    assert "Indexer RPC: https://indexer.example/" in result.output


def test_build_manager_uses_cli_endpoints():
    state = cli_module.CliState(
        private_key=PRIVATE_KEY, rpc_url="https://rpc.example/", indexer_rpc="https://indexer.example/"
    )

    manager = cli_module.build_manager(state)

    assert manager.client.private_key == PRIVATE_KEY
    assert manager.client.rpc_url == "https://rpc.example/"
    assert manager.client.indexer_rpc == "https://indexer.example/"


@pytest.mark.parametrize("args, expected", [([], "ERROR"), (["-v"], logging.DEBUG)])
def test_logging_level_follows_settings(runner, monkeypatch, args, expected):
    levels = []
    monkeypatch.setattr(settings, "log_level", "error")
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: levels.append(kwargs["level"]))

    result = runner.invoke(cli, ["-k", PRIVATE_KEY, *args, "config"])

    assert result.exit_code == 0, result.output
    assert levels == [expected]
