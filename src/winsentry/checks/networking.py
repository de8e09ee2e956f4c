"""Windows networking checks."""
from __future__ import annotations

from .base import CategoryChecker
from .types import Method

PUBLIC_NETWORK = 0
PUBLIC_CONTROL = "Network Location of all connections set to Public"


class WindowsNetworkingCheck(CategoryChecker):
    category = "WindowsNetworking"
    description = "Checks network profiles and networking policies."
    policy_origins = (Method.GROUP_POLICY, Method.REGISTRY)
    merge_security_policies = True

    def evaluate(self) -> None:
        public = all(
            profile.network_category == PUBLIC_NETWORK
            for profile in self.snapshot.net_connection_profiles
        )
        self.add(PUBLIC_CONTROL, PUBLIC_CONTROL, public, str(public), Method.CIM)
