from civmanager.models.base import Base  # noqa: F401
from civmanager.models.character import Character  # noqa: F401
from civmanager.models.civilization import Civilization  # noqa: F401
from civmanager.models.civilization_resources import CivilizationResources  # noqa: F401
from civmanager.models.job import Job  # noqa: F401
from civmanager.models.user import User  # noqa: F401
