"""Miscellaneous configuration checks."""
from __future__ import annotations

import logging

from ..core.baseline import AUDIT_POLICY_CULTURE, HYPER_V_ADMINISTRATORS_SID, MDM_SYSTEM
from ..core.comparison import check_value, equals_ignore_case
from ..utils.parsers import parse_auditpol_inclusion_setting
from .base import CategoryChecker
from .types import Compliance, Method

logger = logging.getLogger(__name__)

HYPER_V_CONTROL = "All users are part of the Hyper-V Administrators group"
AUDIT_CONTROL = "Audit policy for Other Logon/Logoff Events"
AUDIT_EXPECTED = "Success and Failure"


class MiscellaneousConfigurationsCheck(CategoryChecker):
    category = "MiscellaneousConfigurations"
    description = "Hyper-V group membership, logon auditing and location services."
    policy_origins = (Method.GROUP_POLICY, Method.REGISTRY)

    def evaluate(self) -> None:
        self._check_hyper_v_membership()
        self._check_audit_policy()

        system = self.require(self.snapshot.mdm_policies.get(MDM_SYSTEM), "mdm_policies[System]")
        match = check_value(system, "AllowLocation", "0")
        self.add("Disable Location", "Disable Location", match.is_match, match.value, Method.CIM)

    def _check_hyper_v_membership(self) -> None:
        outsiders = [
            user.name
            for user in self.snapshot.local_users or ()
            if user.enabled
            and user.group_sids is not None
            and not any(equals_ignore_case(sid, HYPER_V_ADMINISTRATORS_SID) for sid in user.group_sids)
        ]
        if outsiders:
            logger.debug("Users outside the Hyper-V Administrators group: %s", ", ".join(outsiders))
        compliant = not outsiders
        self.add(HYPER_V_CONTROL, HYPER_V_CONTROL, compliant, str(compliant), Method.CIM)

    def _check_audit_policy(self) -> None:
        # auditpol column names are localized
        if not equals_ignore_case(self.snapshot.culture_name, AUDIT_POLICY_CULTURE):
            logger.debug("Culture %s is not supported by the audit policy check", self.snapshot.culture_name)
            self.adjust_expected(-1)
            return

        setting = parse_auditpol_inclusion_setting(self.snapshot.auditpol_output)
        if setting is None:
            logger.warning("No usable output from auditpol for Other Logon/Logoff Events")
            self.add(AUDIT_CONTROL, AUDIT_CONTROL, Compliance.FALSE, "N/A", Method.CMDLET)
            return
        compliant = setting == AUDIT_EXPECTED
        self.add(AUDIT_CONTROL, AUDIT_CONTROL, compliant, setting, Method.CMDLET)
