from dataclasses import dataclass


@dataclass
class JobData:
    name: str
    description: str
    min_strength: int = 0
    min_intelligence: int = 0
    min_charisma: int = 0


# Default catalog seeded by migration 002. Administered outside the game.
DEFAULT_JOBS: list[JobData] = [
    JobData(
        name="Ambassador",
        description="Represents the civilization abroad.",
        min_intelligence=14,
        min_charisma=18,
    ),
    JobData(
        name="Blacksmith",
        description="Forges tools and weapons from raw materials.",
        min_strength=14,
        min_intelligence=10,
    ),
    JobData(
        name="Diplomat",
        description="Negotiates with neighbours and keeps the peace.",
        min_intelligence=12,
        min_charisma=14,
    ),
    JobData(
        name="Farmer",
        description="Works the fields to feed the population.",
        min_strength=8,
    ),
    JobData(
        name="General",
        description="Leads the armies in the field.",
        min_strength=16,
        min_intelligence=14,
        min_charisma=14,
    ),
    JobData(
        name="Merchant",
        description="Trades goods and brings gold into the treasury.",
        min_intelligence=10,
        min_charisma=12,
    ),
    JobData(
        name="Miner",
        description="Extracts stone and ore from the earth.",
        min_strength=12,
    ),
    JobData(
        name="Priest",
        description="Tends to the faith and morale of the people.",
        min_intelligence=12,
        min_charisma=12,
    ),
    JobData(
        name="Scholar",
        description="Studies the world and advances knowledge.",
        min_intelligence=15,
    ),
    JobData(
        name="Soldier",
        description="Defends the civilization and raises its military power.",
        min_strength=13,
    ),
]


def list_default_jobs() -> list[JobData]:
    return sorted(DEFAULT_JOBS, key=lambda job: job.name)
