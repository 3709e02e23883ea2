import logging
from typing import Dict, Iterable, Optional

from common.models.packages import Package


logger = logging.getLogger(__name__)


DEFAULT_PACKAGES = [
    Package("1", "1", "Temple Meditation Experience", 15000, 10),
    Package("2", "1", "Full Day Sacred Sites Tour", 25000, 8),
    Package("3", "2", "Whale Watching Expedition", 18000, 12),
    Package("4", "2", "Surf Lesson Package", 12000, 6),
    Package("5", "3", "Market to Table Cooking Experience", 9000, 8),
]


class PackageRepository:
    """Read-only view of the package catalog used for pricing bookings."""

    def __init__(self, packages: Optional[Iterable[Package]] = None):
        self._packages: Dict[str, Package] = {}
        for package in DEFAULT_PACKAGES if packages is None else packages:
            self._packages[package.package_id] = package

    def get_by_id(self, package_id: str) -> Optional[Package]:
        package = self._packages.get(package_id)
        if package is None:
            logger.warning(f"Lookup for unknown package {package_id}")
        return package
