import random
from typing import Optional
from faker import Faker
from app.models.player import Player

# Initialize Faker instances - use en_US as fallback for unavailable locales
fake_in = Faker('en_IN')
fake_au = Faker('en_AU')
fake_en = Faker('en_GB')
fake_nz = Faker('en_NZ')
fake_us = Faker('en_US')


class PlayerGenerator:
    """Generates fictional squads for demo tournaments"""

    # Name locale distribution (weighted towards Indian players for IPL)
    LOCALES = [
        (fake_in, 60),
        (fake_au, 12),
        (fake_en, 12),
        (fake_nz, 8),
        (fake_us, 8),
    ]

    # Squad shape: openers and top order first, bowlers last
    SQUAD_ROLES = [
        "Batter",
        "Batter",
        "Batter",
        "Wicket Keeper",
        "Batter",
        "All-Rounder",
        "All-Rounder",
        "Bowler",
        "Bowler",
        "Bowler",
        "Bowler",
    ]

    @staticmethod
    def _weighted_choice(choices: list[tuple], rng: random.Random):
        """Select from weighted choices [(item, weight), ...]"""
        items = [c[0] for c in choices]
        weights = [c[1] for c in choices]
        return rng.choices(items, weights=weights, k=1)[0]

    @classmethod
    def generate_player(cls, role: str, team_id: Optional[int] = None, rng: Optional[random.Random] = None) -> Player:
        rng = rng or random
        faker_instance = cls._weighted_choice(cls.LOCALES, rng)
        return Player(name=faker_instance.name_male(), role=role, team_id=team_id)

    @classmethod
    def generate_squad(cls, team_id: Optional[int] = None, size: int = 11, rng: Optional[random.Random] = None) -> list[Player]:
        """
        A squad in batting order. Sizes beyond eleven are padded with
        all-rounders; smaller squads keep the top of the order.
        """
        roles = cls.SQUAD_ROLES[:size] + ["All-Rounder"] * max(0, size - len(cls.SQUAD_ROLES))
        return [cls.generate_player(role, team_id=team_id, rng=rng) for role in roles]
