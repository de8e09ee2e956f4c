"""BitLocker and DMA protection checks."""
from __future__ import annotations

import logging

from ..core.baseline import FVE_POLICY_KEY, POWER_KEY
from ..core.comparison import classify_fixed_drive, classify_os_drive, non_os_fixed_drives
from .base import CategoryChecker
from .types import Method

logger = logging.getLogger(__name__)

OS_DRIVE_CONTROL = "Secure OS Drive encryption"


class BitLockerSettingsCheck(CategoryChecker):
    """Disk encryption, DMA countermeasures and hibernation."""

    category = "BitLockerSettings"
    description = "Checks BitLocker protection of the OS and fixed data drives."
    policy_origins = (Method.GROUP_POLICY,)

    def evaluate(self) -> None:
        self._check_dma_protection()
        self._check_hibernation()
        self._check_os_drive()
        self._check_fixed_drives()

    def _check_dma_protection(self) -> None:
        # Either kernel DMA protection or the BitLocker countermeasure, not both
        kernel_dma = bool(self.snapshot.kernel_dma_protection)
        logger.debug("Kernel DMA protection is %s", "enabled" if kernel_dma else "disabled")
        bitlocker_dma = self.container.registry_value(FVE_POLICY_KEY, "DisableExternalDMAUnderLock") == "1"
        state = kernel_dma ^ bitlocker_dma
        self.add("DMA protection", "DMA protection", state, str(state), Method.WINDOWS_API)

    def _check_hibernation(self) -> None:
        configuration = self.require(self.snapshot.defender_configuration, "defender_configuration")
        if configuration.is_virtual_machine:
            logger.debug("Virtual machine detected; skipping hibernation check")
            self.adjust_expected(-1)
            return
        full = self.container.registry_value(POWER_KEY, "HiberFileType") == "2"
        self.add("Hibernate is set to full", "Hibernate is set to full", full, str(full), Method.REGISTRY)

    def _check_os_drive(self) -> None:
        if self.snapshot.os_volume is None:
            logger.warning("No BitLocker information for the OS drive")
        compliant, level = classify_os_drive(self.snapshot.os_volume)
        self.add(OS_DRIVE_CONTROL, OS_DRIVE_CONTROL, compliant, level, Method.CIM)

    def _check_fixed_drives(self) -> None:
        for volume in non_os_fixed_drives(self.snapshot.volumes):
            # The static baseline cannot know how many data drives exist
            self.adjust_expected(1)
            compliant, value = classify_fixed_drive(volume)
            control = f"Secure Drive {volume.mount_point} encryption"
            self.add(control, control, compliant, value, Method.CIM)
