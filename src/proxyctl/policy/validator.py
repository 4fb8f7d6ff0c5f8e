"""Policy preconditions checked before anything is sent to HNS."""

from __future__ import annotations

from proxyctl.errors import ValidationError
from proxyctl.policy.models import Policy


def validate_policy(policy: Policy) -> None:
    """Raise ValidationError if the policy cannot be applied.

    For now the only rule is a nonzero proxy port.
    """
    if policy.proxy_port == 0:
        raise ValidationError("policy has invalid proxy port number 0")
