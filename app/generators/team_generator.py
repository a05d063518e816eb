"""
Team Generator - fictional IPL-style franchises for demo tournaments
"""
from app.models.team import Team


DEMO_TEAMS = [
    ("Mumbai Titans", "MT"),
    ("Chennai Kings", "CK"),
    ("Bangalore Warriors", "BW"),
    ("Kolkata Knights", "KK"),
    ("Delhi Capitals", "DC"),
    ("Hyderabad Sunrisers", "HS"),
    ("Rajasthan Royals", "RR"),
    ("Punjab Lions", "PL"),
]


class TeamGenerator:
    """Builds franchise teams for a tournament"""

    @classmethod
    def create_teams(cls, tournament_id: int, count: int = 4) -> list[Team]:
        """
        Teams for a tournament, in franchise order.

        Args:
            tournament_id: ID of the tournament the teams play in
            count: Number of teams (2-8)

        Returns:
            List of Team objects (not yet saved to DB)
        """
        if not 2 <= count <= len(DEMO_TEAMS):
            raise ValueError(f"count must be between 2 and {len(DEMO_TEAMS)}")
        return [
            Team(tournament_id=tournament_id, name=name, short_name=short_name)
            for name, short_name in DEMO_TEAMS[:count]
        ]
