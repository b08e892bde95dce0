"""Actionable error catalog for runner-provisioner."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "missing_arguments": {
        "what": "Missing required arguments.",
        "next": "Pass at least the repository URL and a runner registration token.",
    },
    "checksum_mismatch": {
        "what": "Checksum mismatch for {filename}. Expected {expected}, but got {actual}.",
        "next": "Delete the package and retry; if it persists, confirm the release digest.",
    },
    "insecure_http": {
        "what": "{label} uses insecure HTTP.",
        "next": "Use an HTTPS release mirror.",
    },
    "invalid_sha256": {
        "what": "{label} must be a valid SHA-256 hash (64 hexadecimal characters).",
        "next": "Copy the digest published next to the runner release asset.",
    },
    "unverified_release": {
        "what": "Runner version {version} was requested without its SHA-256 digest.",
        "next": "Provide `--runner-sha256` (or `runner_sha256` in config) for that release.",
    },
    "account_setup_failed": {
        "what": "Could not create account `{username}`.",
        "next": "Check that `useradd` is available and the name is valid, or create the account manually.",
    },
    "privileged_account": {
        "what": "Account `{username}` has uid 0, so the runner would keep root privileges.",
        "next": "Pass an unprivileged username as the sixth argument.",
    },
    "registration_failed": {
        "what": "Runner registration failed with exit status {returncode}.",
        "next": "Registration tokens expire after one hour; generate a new one and retry.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
