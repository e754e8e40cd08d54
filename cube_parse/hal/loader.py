import os
from dataclasses import replace
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional
from logging import Logger
from .mcu_config import McuConfiguration
from .gpio_config import GpioModesConfiguration
from .parsers import parse_mcu_ref_name
from .pin_signal import McuRecord
from .utils import natural_sorted


class CubeDatabaseLoader:
    """Handles the extraction and indexing of the STM32CubeMX MCU database directory."""

    def __init__(self, logger: Logger, db_dir: str, family: str):
        self.log: Logger = logger
        self.db_dir = db_dir
        self.family = family

        self.mcus: List[McuRecord] = []
        # GPIO IP version (e.g. "STM32L051_gpio_v1_0") -> MCUs using it
        self.mcu_gpio_map: Dict[str, List[McuRecord]] = {}
        self._gpio_configs: Dict[str, GpioModesConfiguration] = {}

    def load_all(self) -> bool:
        """Sequential execution of the loading pipeline."""
        if not self._load_families(): return False
        if not self._load_mcus(): return False
        return True

    def _load_families(self) -> bool:
        """
        Loads families.xml and collects the MCUs of the requested family.
        """
        if not self.db_dir or not os.path.isdir(self.db_dir):
            self.log.error("Database directory does not exist", extra={"path": self.db_dir})
            return False

        families_path = os.path.join(self.db_dir, "families.xml")
        if not os.path.exists(families_path):
            self.log.error("families.xml not found in database directory", extra={"path": families_path})
            return False

        try:
            root = ET.parse(families_path).getroot()
        except ET.ParseError as e:
            self.log.error("Failed to parse families XML: %s", e, extra={"path": families_path})
            return False

        available = []
        for family in root.findall("{*}Family"):
            available.append(family.get("Name"))
            if family.get("Name") != self.family:
                continue
            for subfamily in family.findall("{*}SubFamily"):
                for mcu in subfamily.findall("{*}Mcu"):
                    ref_name = mcu.get("RefName")
                    if not self._is_valid_ref_name(ref_name, mcu.get("Name")):
                        continue
                    self.mcus.append(McuRecord(name=mcu.get("Name"),
                                               ref_name=ref_name,
                                               package=mcu.get("PackageName"),
                                               subfamily=subfamily.get("Name")))

        if not self.mcus and self.family in available:
            self.log.error("No usable MCUs in family %s", self.family)
            return False
        if not self.mcus:
            self.log.error("Could not find family %s", self.family,
                           extra={"available_families": natural_sorted(a for a in available if a)})
            return False

        self.log.info("Families loaded successfully", extra={"family": self.family, "count": len(self.mcus)})
        return True

    def _is_valid_ref_name(self, ref_name: Optional[str], name: Optional[str]) -> bool:
        """MCUs without a usable reference name cannot get a feature flag and are skipped."""
        if parse_mcu_ref_name(ref_name, self.log) is None:
            return False
        if not name:
            self.log.warning("Skipping MCU %s without description name", ref_name, extra={"mcu": ref_name})
            return False
        return True

    def _load_mcus(self) -> bool:
        """
        Loads every MCU description of the family and indexes MCUs by GPIO IP version.
        """
        records = []
        for mcu in self.mcus:
            mcu_path = os.path.join(self.db_dir, f"{mcu.name}.xml")
            if not os.path.exists(mcu_path):
                self.log.error("MCU description does not exist", extra={"path": mcu_path})
                return False

            mcu_config = McuConfiguration(file_path=mcu_path, logger=self.log, source_name=mcu.name)
            gpio_version = mcu_config.get_ip_version("GPIO")
            if not gpio_version:
                self.log.error("Could not load MCU data", extra={"mcu": mcu.ref_name, "path": mcu_path})
                return False

            if mcu.package is None:
                mcu = replace(mcu, package=mcu_config.get_package_name())
            records.append(mcu)
            self.mcu_gpio_map.setdefault(gpio_version, []).append(mcu)

        self.mcus = records
        self.log.info("MCU descriptions loaded", extra={
            "count": len(self.mcus),
            "gpio_versions": natural_sorted(self.mcu_gpio_map),
        })
        return True

    def load_gpio_config(self, gpio_version: str) -> Optional[GpioModesConfiguration]:
        """
        Reads IP/GPIO-<version>_Modes.xml. Results are cached per version.
        """
        if gpio_version in self._gpio_configs:
            return self._gpio_configs[gpio_version]

        target_path = os.path.join(self.db_dir, "IP", f"GPIO-{gpio_version}_Modes.xml")
        if not os.path.exists(target_path):
            self.log.error("GPIO modes file missing from database", extra={"path": target_path})
            return None

        gpio_config = GpioModesConfiguration(target_path, self.log, source_name=os.path.basename(target_path))
        if not gpio_config.is_loaded:
            return None
        if gpio_config.version != gpio_version:
            self.log.warning("GPIO modes file declares version %s", gpio_config.version,
                             extra={"path": target_path, "expected": gpio_version})
        self._gpio_configs[gpio_version] = gpio_config
        return gpio_config
