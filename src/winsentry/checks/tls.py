"""TLS configuration checks."""
from __future__ import annotations

from ..core.baseline import ECC_CURVES, TLS_CIPHER_SUITES
from ..core.comparison import mdm_value_matches, sequence_equals_ignore_case
from .base import CategoryChecker
from .types import Method

ECC_CONTROL = "ECC Curves and their positions"
CIPHER_CONTROL = "Configure the correct TLS Cipher Suites"


class TLSSecurityCheck(CategoryChecker):
    category = "TLSSecurity"
    description = "Checks ECC curve order and the TLS cipher suite policy."
    policy_origins = (Method.GROUP_POLICY, Method.REGISTRY)

    def evaluate(self) -> None:
        curves = self.snapshot.ecc_curves
        in_order = sequence_equals_ignore_case(curves, ECC_CURVES)
        self.add(ECC_CONTROL, ECC_CONTROL, in_order, ", ".join(curves or ()), Method.CMDLET)

        results = self.require(self.snapshot.mdm_results, "mdm_results")
        suites = mdm_value_matches(results, "TLSCipherSuites", TLS_CIPHER_SUITES)
        self.add(CIPHER_CONTROL, CIPHER_CONTROL, suites, str(suites), Method.MDM)
