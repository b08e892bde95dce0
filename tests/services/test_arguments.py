import pytest

from runnerprovisioner.errors import MissingArgument
from runnerprovisioner.models import RunDefaults
from runnerprovisioner.services.arguments import ArgumentResolver


def _resolver(**kwargs) -> ArgumentResolver:
    return ArgumentResolver(hostname=lambda: "build-host", clock=lambda: 1700000000.75, **kwargs)


@pytest.mark.parametrize("tokens", [[], ["https://github.com/acme/widgets"]])
def test_resolve_requires_url_and_token(tokens):
    with pytest.raises(MissingArgument, match="Missing required arguments"):
        _resolver().resolve(tokens)


def test_resolve_applies_defaults_for_two_arguments():
    config = _resolver().resolve(["https://github.com/acme/widgets", "TKN123"])

    assert config.repo_url == "https://github.com/acme/widgets"
    assert config.token == "TKN123"
    assert config.runner_name == "build-host-1700000000"
    assert config.labels == "azure-linux"
    assert config.work_dir == "_work"
    assert config.username == "runner"


def test_resolve_keeps_every_positional_value():
    config = _resolver().resolve(
        ["https://github.com/acme/widgets", "TKN123", "bot1", "gpu,linux", "_work2", "ciuser"]
    )

    assert config.runner_name == "bot1"
    assert config.labels == "gpu,linux"
    assert config.work_dir == "_work2"
    assert config.username == "ciuser"


def test_resolve_treats_empty_slots_as_absent():
    config = _resolver(defaults=RunDefaults(labels="self-hosted")).resolve(
        ["https://github.com/acme/widgets", "TKN123", "", "", "_w"]
    )

    assert config.runner_name == "build-host-1700000000"
    assert config.labels == "self-hosted"
    assert config.work_dir == "_w"


def test_token_is_hidden_from_repr():
    config = _resolver().resolve(["https://github.com/acme/widgets", "TKN123"])

    assert "TKN123" not in repr(config)


def test_usage_lists_arguments_and_examples():
    usage = _resolver().usage("runner-provisioner")

    assert usage.startswith("Usage: runner-provisioner <repo_url> <token>")
    assert "default: azure-linux" in usage
    assert "Examples:" in usage
