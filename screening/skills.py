import json
import logging
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

from .errors import UnknownDomainError

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN_SKILLS: Mapping[str, str] = MappingProxyType({
    "fullstack": "React, Node.js, REST API, MongoDB, Express, HTML, CSS, JavaScript",
    "networking": "Cisco, Routing, Switching, Packet Tracer, Firewall, Load Balancing",
    "iot": "Sensors, Embedded Systems, Arduino, STM32, IoT Monitoring",
    "datasci": "Python, Machine Learning, Pandas, Data Analysis, Deep Learning",
})


def _normalize(domain: str) -> str:
    return (domain or "").strip().lower()


class SkillCatalog:
    """Read-only mapping of domain id -> required skills text."""

    def __init__(self, skills: Mapping[str, str]):
        cleaned: Dict[str, str] = {}
        for domain, text in skills.items():
            key = _normalize(domain)
            if not key:
                raise ValueError("Domain ids cannot be empty")
            if not isinstance(text, str) or not text.strip():
                raise ValueError(f"Skills for domain {domain!r} must be a non-empty string")
            cleaned[key] = text.strip()
        if not cleaned:
            raise ValueError("Skill catalog needs at least one domain")
        self._skills = MappingProxyType(cleaned)

    @classmethod
    def default(cls) -> "SkillCatalog":
        return cls(DEFAULT_DOMAIN_SKILLS)

    @classmethod
    def from_json(cls, path: str) -> "SkillCatalog":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object of domain -> skills")
        return cls(data)

    @property
    def domains(self) -> List[str]:
        return list(self._skills)

    def skills_for(self, domain: str) -> str:
        try:
            return self._skills[_normalize(domain)]
        except KeyError:
            raise UnknownDomainError(domain) from None

    def split_skills(self, domain: str) -> List[str]:
        """Skill tokens of a domain, in catalog order."""
        return [s.strip() for s in self.skills_for(domain).split(",") if s.strip()]

    def as_dict(self) -> Dict[str, str]:
        return dict(self._skills)

    def __contains__(self, domain: object) -> bool:
        return isinstance(domain, str) and _normalize(domain) in self._skills

    def __iter__(self) -> Iterator[str]:
        return iter(self._skills)

    def __len__(self) -> int:
        return len(self._skills)


def load_catalog(skills_file: Optional[str] = None) -> SkillCatalog:
    if skills_file:
        logger.info(f"Loading domain skills from {skills_file}")
        return SkillCatalog.from_json(skills_file)
    return SkillCatalog.default()
