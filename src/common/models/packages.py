from dataclasses import dataclass


@dataclass
class Package:
    package_id: str
    journey_id: str
    name: str
    price_lkr: float
    max_guests: int
    hidden: bool = False
